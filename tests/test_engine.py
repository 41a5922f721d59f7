# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the built-in and command-backed formatting engines."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from luafmt.config import FormatConfig, FormatRange, IndentType, LineEndings
from luafmt.errors import FormatError
from luafmt.formatting import CommandFormatter, WhitespaceFormatter

SOURCE = "local function f()\n    if x then  \n        return 1\n    end\nend\n\n\n"


def test_whitespace_formatter_converts_spaces_to_tabs() -> None:
    formatted = WhitespaceFormatter().format(SOURCE, FormatConfig(), None)

    assert formatted == "local function f()\n\tif x then\n\t\treturn 1\n\tend\nend\n"


def test_whitespace_formatter_converts_tabs_to_spaces() -> None:
    config = FormatConfig(indent_type=IndentType.SPACES, indent_width=2)

    formatted = WhitespaceFormatter().format("do\n\tprint(1)\n\t  x()\nend", config, None)

    assert formatted == "do\n  print(1)\n    x()\nend\n"


def test_whitespace_formatter_keeps_partial_indent_as_spaces() -> None:
    formatted = WhitespaceFormatter().format("      x = 1\n", FormatConfig(), None)

    assert formatted == "\t  x = 1\n"


def test_whitespace_formatter_emits_configured_line_endings() -> None:
    config = FormatConfig(line_endings=LineEndings.WINDOWS)

    formatted = WhitespaceFormatter().format("a = 1\nb = 2\n", config, None)

    assert formatted == "a = 1\r\nb = 2\r\n"


def test_whitespace_formatter_is_idempotent() -> None:
    engine = WhitespaceFormatter()
    once = engine.format(SOURCE, FormatConfig(), None)

    assert engine.format(once, FormatConfig(), None) == once


def test_whitespace_formatter_handles_empty_input() -> None:
    assert WhitespaceFormatter().format("", FormatConfig(), None) == ""
    assert WhitespaceFormatter().format("\n\n  \n", FormatConfig(), None) == ""


def test_whitespace_formatter_only_touches_lines_in_range() -> None:
    source = "a = 1   \n    b = 2   \n    c = 3   \n"
    second_line = source.index("    b")

    formatted = WhitespaceFormatter().format(source, FormatConfig(), FormatRange(start=second_line, end=second_line))

    assert formatted == "a = 1   \n\tb = 2\n    c = 3   \n"


def test_whitespace_formatter_rejects_binary_input() -> None:
    with pytest.raises(FormatError, match="NUL"):
        WhitespaceFormatter().format("a\x00b", FormatConfig(), None)


def test_command_formatter_forwards_configuration() -> None:
    engine = CommandFormatter([sys.executable, "-"])

    args = engine.build_arguments(FormatConfig(indent_width=2), FormatRange(start=3, end=9))

    assert args[:2] == [sys.executable, "-"]
    assert args[args.index("--indent-width") + 1] == "2"
    assert args[args.index("--indent-type") + 1] == "Tabs"
    assert args[args.index("--range-start") + 1] == "3"
    assert args[args.index("--range-end") + 1] == "9"


def test_command_formatter_pipes_source_through_command(tmp_path: Path) -> None:
    script = tmp_path / "upper.py"
    script.write_text("import sys\nsys.stdout.write(sys.stdin.read().upper())\n", encoding="utf-8")
    engine = CommandFormatter([sys.executable, str(script)])

    assert engine.format("return x\n", FormatConfig(), None) == "RETURN X\n"


def test_command_formatter_reports_non_zero_exit(tmp_path: Path) -> None:
    script = tmp_path / "broken.py"
    script.write_text("import sys\nsys.stderr.write('syntax error')\nsys.exit(2)\n", encoding="utf-8")
    engine = CommandFormatter([sys.executable, str(script)])

    with pytest.raises(FormatError, match="exited with status 2.*syntax error"):
        engine.format("return", FormatConfig(), None)


def test_command_formatter_reports_missing_executable() -> None:
    engine = CommandFormatter(["luafmt-definitely-not-installed", "-"])

    with pytest.raises(FormatError, match="was not found on PATH"):
        engine.format("return", FormatConfig(), None)


def test_command_formatter_requires_a_command() -> None:
    with pytest.raises(ValueError):
        CommandFormatter([])
