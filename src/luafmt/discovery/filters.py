# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Default file-extension filtering applied to recursively discovered files."""

from __future__ import annotations

from pathlib import Path
from typing import Final

import pathspec

from .walker import FileEntry

DEFAULT_GLOB: Final[str] = "**/*.lua"
_DEFAULT_SPEC: Final[pathspec.PathSpec] = pathspec.PathSpec.from_lines("gitignore", [DEFAULT_GLOB])


def matches_default_glob(path: Path) -> bool:
    """Return whether ``path`` carries the default Lua extension."""

    return _DEFAULT_SPEC.match_file(path.as_posix())


def should_format(entry: FileEntry, *, use_default_glob: bool) -> bool:
    """Decide whether a discovered file is handed to a formatting job.

    Explicitly named files are always formatted. When override globs were
    supplied they already decided inclusion during discovery; otherwise the
    file must match :data:`DEFAULT_GLOB`.

    Args:
        entry: File produced by discovery.
        use_default_glob: ``False`` when override globs are in effect.

    Returns:
        bool: ``True`` when the file should be formatted.
    """

    if entry.explicit or not use_default_glob:
        return True
    return matches_default_glob(entry.path)


__all__ = ["DEFAULT_GLOB", "matches_default_glob", "should_format"]
