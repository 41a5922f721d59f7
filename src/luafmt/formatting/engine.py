# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Formatting engines invoked by formatting jobs."""

from __future__ import annotations

import shutil
import subprocess  # nosec B404
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from ..config.models import FormatConfig, FormatRange, IndentType
from ..errors import FormatError

_ENCODING: Final[str] = "utf-8"
_NUL: Final[str] = "\x00"
_TAB: Final[str] = "\t"
_TRAILING_WHITESPACE: Final[str] = " \t\f\v"


@dataclass(frozen=True, slots=True)
class _SourceLine:
    """One physical line together with its offset into the source."""

    offset: int
    content: str
    ending: str


def _split_lines(source: str) -> list[_SourceLine]:
    lines: list[_SourceLine] = []
    offset = 0
    for raw in source.splitlines(keepends=True):
        content = raw.rstrip("\r\n")
        lines.append(_SourceLine(offset=offset, content=content, ending=raw[len(content) :]))
        offset += len(raw)
    return lines


def _indent_width(whitespace: str, tab_width: int) -> int:
    """Return the visual column reached by a run of leading whitespace."""

    column = 0
    for char in whitespace:
        if char == _TAB:
            column += tab_width - (column % tab_width)
        else:
            column += 1
    return column


def _reindent(content: str, config: FormatConfig) -> str:
    """Return ``content`` with normalised leading and trailing whitespace."""

    stripped = content.rstrip(_TRAILING_WHITESPACE)
    body = stripped.lstrip(" \t")
    if not body:
        return ""
    width = _indent_width(stripped[: len(stripped) - len(body)], config.indent_width)
    if config.indent_type is IndentType.SPACES:
        return " " * width + body
    levels, remainder = divmod(width, config.indent_width)
    return _TAB * levels + " " * remainder + body


class WhitespaceFormatter:
    """Language-agnostic normaliser used when no external formatter is configured.

    The formatter rewrites indentation to the configured indent type and
    width, strips trailing whitespace, collapses trailing blank lines into a
    single final newline and emits the configured line endings. When a range
    is supplied only lines starting inside it are rewritten and the end of
    the file is left untouched unless the range reaches it.
    """

    def format(self, source: str, config: FormatConfig, format_range: FormatRange | None) -> str:
        """Return the normalised form of ``source``.

        Args:
            source: Text to format.
            config: Shared formatting configuration.
            format_range: Optional span limiting the rewritten lines.

        Returns:
            str: Formatted text.

        Raises:
            FormatError: When ``source`` looks like binary content.
        """

        if _NUL in source:
            raise FormatError("input contains NUL bytes and does not look like source text")
        newline = config.line_endings.separator
        pieces: list[str] = []
        for line in _split_lines(source):
            if format_range is None or format_range.contains(line.offset):
                pieces.append(_reindent(line.content, config))
                pieces.append(newline if line.ending else "")
            else:
                pieces.append(line.content)
                pieces.append(line.ending)
        formatted = "".join(pieces)
        if format_range is not None and format_range.end is not None and format_range.end < len(source):
            return formatted
        body = formatted.rstrip("\r\n")
        return f"{body}{newline}" if body else ""

    def __repr__(self) -> str:
        return "WhitespaceFormatter()"


class CommandFormatter:
    """Delegate formatting to an external, stylua-compatible command.

    Source text is written to the command's stdin and the formatted text read
    from its stdout. Configuration values and range bounds are forwarded as
    stylua-style long options appended to ``command``.
    """

    def __init__(self, command: Sequence[str], *, cwd: Path | None = None, timeout: float | None = None) -> None:
        """Create a formatter around ``command``.

        Args:
            command: Executable followed by its arguments, for example ``("stylua", "-")``.
            cwd: Optional working directory for the subprocess.
            timeout: Optional timeout in seconds for a single invocation.

        Raises:
            ValueError: When ``command`` is empty.
        """

        if not command:
            raise ValueError("formatter command requires at least one argument")
        self._command = tuple(command)
        self._cwd = cwd
        self._timeout = timeout

    @property
    def command(self) -> tuple[str, ...]:
        """Return the configured command prefix."""

        return self._command

    def build_arguments(self, config: FormatConfig, format_range: FormatRange | None) -> list[str]:
        """Return the full argument vector for one invocation.

        Args:
            config: Formatting configuration forwarded as options.
            format_range: Optional range forwarded as ``--range-start``/``--range-end``.

        Returns:
            list[str]: Command arguments with the executable resolved on ``PATH``.

        Raises:
            FormatError: When the executable cannot be found.
        """

        head, *rest = self._command
        resolved = head if Path(head).is_absolute() else shutil.which(head)
        if resolved is None:
            raise FormatError(f"Executable '{head}' was not found on PATH")
        args = [
            resolved,
            *rest,
            "--column-width",
            str(config.column_width),
            "--line-endings",
            config.line_endings.value,
            "--indent-type",
            config.indent_type.value,
            "--indent-width",
            str(config.indent_width),
            "--quote-style",
            config.quote_style.value,
        ]
        if format_range is not None and format_range.start is not None:
            args.extend(["--range-start", str(format_range.start)])
        if format_range is not None and format_range.end is not None:
            args.extend(["--range-end", str(format_range.end)])
        return args

    def format(self, source: str, config: FormatConfig, format_range: FormatRange | None) -> str:
        """Run the external command over ``source`` and return its output.

        Raises:
            FormatError: When the command is missing, times out or exits non-zero.
        """

        args = self.build_arguments(config, format_range)
        try:
            completed = subprocess.run(  # nosec B603 - shell-free invocation
                args,
                input=source.encode(_ENCODING),
                capture_output=True,
                cwd=self._cwd,
                timeout=self._timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise FormatError(f"could not run {self._command[0]}: {exc}") from exc
        if completed.returncode != 0:
            detail = completed.stderr.decode(_ENCODING, errors="replace").strip() or "<none>"
            raise FormatError(f"Command '{self._command[0]}' exited with status {completed.returncode}. stderr: {detail}")
        try:
            return completed.stdout.decode(_ENCODING)
        except UnicodeDecodeError as exc:
            raise FormatError(f"{self._command[0]} produced output that is not valid UTF-8") from exc

    def __repr__(self) -> str:
        return f"CommandFormatter({' '.join(self._command)!r})"


__all__ = ["CommandFormatter", "WhitespaceFormatter"]
