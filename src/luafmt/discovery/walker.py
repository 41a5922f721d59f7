# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Filesystem traversal producing the entries a run formats."""

from __future__ import annotations

import os
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .rules import IgnoreFile, OverrideGlobs, is_ignored, load_parent_ignore_files

STDIN_MARKER: Final[str] = "-"


@dataclass(frozen=True, slots=True)
class StdinEntry:
    """Sentinel entry requesting that standard input be formatted."""


@dataclass(frozen=True, slots=True)
class FileEntry:
    """Regular file found during discovery.

    ``explicit`` is set for files named directly as a root; those bypass
    ignore files, override globs and the default extension filter.
    """

    path: Path
    explicit: bool = False


@dataclass(frozen=True, slots=True)
class WalkError:
    """Non-fatal traversal failure for a single path."""

    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


def _identity(path: Path) -> str:
    """Return the key under which ``path`` is deduplicated."""

    return os.path.normcase(os.path.realpath(path))


DiscoveredEntry = StdinEntry | FileEntry
WalkItem = StdinEntry | FileEntry | WalkError


@dataclass(frozen=True, slots=True)
class _WalkContext:
    """Per-root traversal state."""

    ignore_files: tuple[IgnoreFile, ...]
    overrides: OverrideGlobs | None


class PathWalker:
    """Walk roots depth-first yielding stdin sentinels, files and walk errors.

    Directory listings are sorted by name so runs over the same tree visit
    files in the same order. Hidden entries are included; symlinked
    directories are not followed.

    Every file is yielded at most once per walk, even when roots overlap or
    repeat. A file that is also named as an explicit root is only yielded
    from that root, so it keeps bypassing the filters.
    """

    def __init__(
        self,
        roots: Sequence[str],
        *,
        overrides: OverrideGlobs | None = None,
        cwd: Path | None = None,
    ) -> None:
        """Create a walker over ``roots``.

        Args:
            roots: Paths as supplied by the user, ``-`` denoting stdin.
            overrides: Optional compiled override globs.
            cwd: Directory relative roots are resolved against; the process
                working directory when omitted.
        """

        self._roots = tuple(roots)
        self._overrides = overrides
        self._cwd = cwd
        self._seen: set[str] = set()
        self._explicit: set[str] = set()

    def __iter__(self) -> Iterator[WalkItem]:
        """Yield every discovered entry in root order."""

        self._seen = set()
        self._explicit = {
            _identity(path) for path in map(self._resolve, self._roots) if path is not None and path.is_file()
        }
        for root in self._roots:
            yield from self._walk_root(root)

    def _resolve(self, root: str) -> Path | None:
        if root == STDIN_MARKER:
            return None
        path = Path(root)
        if self._cwd is None or path.is_absolute():
            return path
        return self._cwd / path

    def _claim(self, path: Path, *, explicit: bool) -> bool:
        """Return whether ``path`` has not been yielded yet and record it."""

        key = _identity(path)
        if key in self._seen or (not explicit and key in self._explicit):
            return False
        self._seen.add(key)
        return True

    def _walk_root(self, root: str) -> Iterator[WalkItem]:
        path = self._resolve(root)
        if path is None:
            yield StdinEntry()
            return
        if path.is_dir():
            absolute = Path(os.path.abspath(path))
            context = _WalkContext(
                ignore_files=load_parent_ignore_files(absolute),
                overrides=self._overrides,
            )
            yield from self._walk_directory(path, absolute, context)
            return
        if path.is_file():
            if self._claim(path, explicit=True):
                yield FileEntry(path=path, explicit=True)
            return
        if path.exists():
            return
        yield WalkError(path=path, message="No such file or directory")

    def _walk_directory(self, directory: Path, absolute: Path, context: _WalkContext) -> Iterator[WalkItem]:
        """Yield entries below ``directory``.

        Args:
            directory: Directory path in the form reported to the user.
            absolute: Absolute form of ``directory`` used for rule matching.
            context: Ignore files collected from ancestors and override globs.

        Yields:
            WalkItem: Files below ``directory`` and any traversal errors.
        """

        try:
            with os.scandir(directory) as iterator:
                children = sorted(iterator, key=lambda child: child.name)
        except OSError as exc:
            yield WalkError(path=directory, message=exc.strerror or str(exc))
            return

        ignore_files = context.ignore_files
        try:
            local = IgnoreFile.load(absolute)
        except (OSError, ValueError) as exc:
            yield WalkError(path=directory, message=f"could not read ignore file: {exc}")
            local = None
        if local is not None:
            ignore_files = (*ignore_files, local)
        nested = _WalkContext(ignore_files=ignore_files, overrides=context.overrides)

        for child in children:
            child_path = directory / child.name
            child_absolute = absolute / child.name
            try:
                is_dir = child.is_dir(follow_symlinks=False)
                is_file = not is_dir and child.is_file()
            except OSError as exc:
                yield WalkError(path=child_path, message=exc.strerror or str(exc))
                continue
            if is_ignored(child_absolute, is_dir=is_dir, ignore_files=ignore_files, overrides=nested.overrides):
                continue
            if is_dir:
                yield from self._walk_directory(child_path, child_absolute, nested)
            elif is_file and self._claim(child_path, explicit=False):
                yield FileEntry(path=child_path)


__all__ = [
    "STDIN_MARKER",
    "DiscoveredEntry",
    "FileEntry",
    "PathWalker",
    "StdinEntry",
    "WalkError",
    "WalkItem",
]
