# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Render unified diffs between original and formatted text."""

from __future__ import annotations

import difflib
from typing import Final

from ..errors import DiffError
from ..logging import colorize

DEFAULT_CONTEXT_LINES: Final[int] = 3
_ORIGINAL_LABEL: Final[str] = "original"
_FORMATTED_LABEL: Final[str] = "formatted"


def _style_for(line: str, *, in_hunk: bool) -> str | None:
    # before the first hunk only the file labels can appear
    if not in_hunk and line.startswith(("+++", "---")):
        return "bold"
    if line.startswith("@@"):
        return "cyan"
    if line.startswith("+"):
        return "green"
    if line.startswith("-"):
        return "red"
    return None


def output_diff(
    original: str,
    formatted: str,
    context_lines: int,
    header: str,
    use_color: bool,
) -> bytes | None:
    """Return a unified diff of ``original`` against ``formatted``.

    Args:
        original: Text read from disk.
        formatted: Text produced by the formatting engine.
        context_lines: Number of unchanged lines shown around each hunk.
        header: Line printed above the diff, typically naming the file.
        use_color: Emit ANSI colour codes when ``True``.

    Returns:
        bytes | None: UTF-8 encoded diff block, or ``None`` when the texts are identical.

    Raises:
        DiffError: When the diff cannot be rendered.
    """

    if original == formatted:
        return None
    if context_lines < 0:
        raise DiffError(f"context line count must be non-negative, got {context_lines}")
    diff_lines = difflib.unified_diff(
        original.splitlines(),
        formatted.splitlines(),
        fromfile=_ORIGINAL_LABEL,
        tofile=_FORMATTED_LABEL,
        n=context_lines,
        lineterm="",
    )
    rendered = [colorize(header, "bold", use_color)]
    in_hunk = False
    for line in diff_lines:
        in_hunk = in_hunk or line.startswith("@@")
        style = _style_for(line, in_hunk=in_hunk)
        rendered.append(colorize(line, style, use_color) if style else line)
    if len(rendered) == 1:
        # only line endings differ, which splitlines() hides
        rendered.append(colorize("line endings or trailing newline differ", "yellow", use_color))
    try:
        return ("\n".join(rendered) + "\n").encode("utf-8")
    except UnicodeEncodeError as exc:
        raise DiffError(f"could not encode diff: {exc}") from exc


__all__ = ["DEFAULT_CONTEXT_LINES", "output_diff"]
