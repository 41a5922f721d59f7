# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Gitignore-style matching for ignore files and override globs."""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final

import pathspec

from ..config.models import ConfigError

IGNORE_FILE_NAME: Final[str] = ".styluaignore"
_PATTERN_STYLE: Final[str] = "gitignore"
_PATH_SEPARATOR: Final[str] = "/"


class MatchDecision(str, Enum):
    """Outcome of matching a path against a rule set."""

    NONE = "none"
    IGNORE = "ignore"
    WHITELIST = "whitelist"


def _relative_key(path: Path, base: Path, *, is_dir: bool) -> str | None:
    """Return ``path`` relative to ``base`` in gitignore notation.

    Args:
        path: Absolute path being matched.
        base: Absolute directory the patterns are relative to.
        is_dir: Whether ``path`` is a directory; directories get a trailing slash.

    Returns:
        str | None: Slash separated relative path, or ``None`` when ``path`` is
        not below ``base``.
    """

    try:
        relative = path.relative_to(base)
    except ValueError:
        return None
    key = relative.as_posix()
    if not key or key == ".":
        return None
    return f"{key}{_PATH_SEPARATOR}" if is_dir else key


def _last_match(spec: pathspec.PathSpec, key: str) -> bool | None:
    """Return the ``include`` flag of the last pattern in ``spec`` matching ``key``."""

    decision: bool | None = None
    for pattern in spec.patterns:
        if pattern.include is None:
            continue
        if pattern.match_file(key):
            decision = pattern.include
    return decision


@dataclass(frozen=True, slots=True)
class IgnoreFile:
    """Patterns read from one ignore file, anchored at its directory."""

    base: Path
    spec: pathspec.PathSpec

    @classmethod
    def load(cls, directory: Path) -> IgnoreFile | None:
        """Read ``directory``'s ignore file when it exists.

        Args:
            directory: Absolute directory that may hold an ignore file.

        Returns:
            IgnoreFile | None: Parsed rules, or ``None`` when no file exists.

        Raises:
            OSError: When the ignore file exists but cannot be read.
            ValueError: When the ignore file contains an invalid pattern.
        """

        candidate = directory / IGNORE_FILE_NAME
        if not candidate.is_file():
            return None
        lines = candidate.read_text(encoding="utf-8").splitlines()
        return cls(base=directory, spec=pathspec.PathSpec.from_lines(_PATTERN_STYLE, lines))

    def decide(self, path: Path, *, is_dir: bool) -> MatchDecision:
        """Return whether this file ignores or whitelists ``path``.

        Args:
            path: Absolute candidate path.
            is_dir: Whether ``path`` is a directory.

        Returns:
            MatchDecision: ``IGNORE`` for a matching pattern, ``WHITELIST`` for a
            matching negated pattern and ``NONE`` otherwise.
        """

        key = _relative_key(path, self.base, is_dir=is_dir)
        if key is None:
            return MatchDecision.NONE
        included = _last_match(self.spec, key)
        if included is None:
            return MatchDecision.NONE
        return MatchDecision.IGNORE if included else MatchDecision.WHITELIST


def load_parent_ignore_files(root: Path) -> tuple[IgnoreFile, ...]:
    """Return ignore files found in the ancestors of ``root``, outermost first.

    Unreadable ancestor ignore files are skipped; only files below a walked
    root are reported as traversal errors.
    """

    found: list[IgnoreFile] = []
    for directory in reversed(root.parents):
        try:
            ignore_file = IgnoreFile.load(directory)
        except (OSError, ValueError):
            continue
        if ignore_file is not None:
            found.append(ignore_file)
    return tuple(found)


def glob_syntax_error(pattern: str) -> str | None:
    """Return why ``pattern`` is not a well-formed glob, or ``None``.

    Character classes must be closed and alternate groups must be balanced
    without nesting. A trailing lone escape is rejected as well.

    Args:
        pattern: Glob without its leading ``!`` negation marker.

    Returns:
        str | None: Description of the first syntax problem found.
    """

    index = 0
    in_group = False
    while index < len(pattern):
        char = pattern[index]
        if char == "\\":
            if index + 1 == len(pattern):
                return "dangling '\\'"
            index += 2
            continue
        if char == "[":
            try:
                index = _skip_class(pattern, index)
            except ValueError:
                return "unclosed character class; missing ']'"
            continue
        if char == "{":
            if in_group:
                return "nested alternate groups are not allowed"
            in_group = True
        elif char == "}":
            if not in_group:
                return "unopened alternate group; missing '{'"
            in_group = False
        index += 1
    if in_group:
        return "unclosed alternate group; missing '}'"
    return None


def _skip_class(pattern: str, index: int) -> int:
    """Return the index just past the character class opening at ``index``."""

    cursor = index + 1
    if cursor < len(pattern) and pattern[cursor] in "!^":
        cursor += 1
    if cursor < len(pattern) and pattern[cursor] == "]":
        cursor += 1
    return pattern.index("]", cursor) + 1


def expand_alternates(pattern: str) -> list[str]:
    """Expand ``{a,b}`` groups in a well-formed glob into plain globs.

    Args:
        pattern: Glob already accepted by :func:`glob_syntax_error`.

    Returns:
        list[str]: One glob per combination of alternatives, in order.
    """

    index = 0
    while index < len(pattern):
        char = pattern[index]
        if char == "\\":
            index += 2
        elif char == "[":
            index = _skip_class(pattern, index)
        elif char == "{":
            break
        else:
            index += 1
    else:
        return [pattern]

    start = index
    options: list[str] = []
    option_start = start + 1
    index = start + 1
    while pattern[index] != "}":
        char = pattern[index]
        if char == "\\":
            index += 2
            continue
        if char == "[":
            index = _skip_class(pattern, index)
            continue
        if char == ",":
            options.append(pattern[option_start:index])
            option_start = index + 1
        index += 1
    options.append(pattern[option_start:index])

    prefix = pattern[:start]
    return [f"{prefix}{option}{suffix}" for option in options for suffix in expand_alternates(pattern[index + 1 :])]


@dataclass(frozen=True, slots=True)
class OverrideGlobs:
    """User supplied include/exclude globs that take precedence over ignore files.

    A plain glob whitelists matching paths and ``!glob`` excludes them. As soon
    as one whitelist glob exists, files matching no glob are excluded while
    directories keep being traversed.
    """

    base: Path
    spec: pathspec.PathSpec
    has_whitelist: bool

    @classmethod
    def compile(cls, patterns: Sequence[str], base: Path) -> OverrideGlobs:
        """Compile ``patterns`` relative to ``base``.

        Args:
            patterns: Override globs as given on the command line.
            base: Directory the globs are relative to, usually the working directory.

        Returns:
            OverrideGlobs: Compiled override rules.

        Raises:
            ConfigError: When a pattern cannot be parsed.
        """

        compiled: list[str] = []
        has_whitelist = False
        for pattern in patterns:
            negated = pattern.startswith("!")
            body = pattern.removeprefix("!")
            problem = glob_syntax_error(body)
            if problem is not None:
                raise ConfigError(f"error: cannot parse glob pattern {pattern}: {problem}")
            expanded = [f"!{glob}" if negated else glob for glob in expand_alternates(body)]
            try:
                pathspec.PathSpec.from_lines(_PATTERN_STYLE, expanded)
            except ValueError as exc:
                raise ConfigError(f"error: cannot parse glob pattern {pattern}: {exc}") from exc
            has_whitelist = has_whitelist or not negated
            compiled.extend(expanded)
        spec = pathspec.PathSpec.from_lines(_PATTERN_STYLE, compiled)
        return cls(base=base, spec=spec, has_whitelist=has_whitelist)

    def decide(self, path: Path, *, is_dir: bool) -> MatchDecision:
        """Return the override decision for ``path``.

        Args:
            path: Absolute candidate path.
            is_dir: Whether ``path`` is a directory.

        Returns:
            MatchDecision: ``WHITELIST`` or ``IGNORE`` when a glob matched, the
            implicit exclusion for unmatched files, or ``NONE``.
        """

        key = _relative_key(path, self.base, is_dir=is_dir)
        if key is None:
            key = os.path.relpath(path, self.base).replace(os.sep, _PATH_SEPARATOR)
            if is_dir:
                key = f"{key}{_PATH_SEPARATOR}"
        # a positive glob is a whitelist entry here, the inverse of an ignore file
        included = _last_match(self.spec, key)
        if included is True:
            return MatchDecision.WHITELIST
        if included is False:
            return MatchDecision.IGNORE
        if self.has_whitelist and not is_dir:
            return MatchDecision.IGNORE
        return MatchDecision.NONE


def is_ignored(
    path: Path,
    *,
    is_dir: bool,
    ignore_files: Iterable[IgnoreFile],
    overrides: OverrideGlobs | None,
) -> bool:
    """Return whether discovery should skip ``path``.

    Args:
        path: Absolute candidate path.
        is_dir: Whether ``path`` is a directory.
        ignore_files: Applicable ignore files ordered outermost first.
        overrides: Optional override globs consulted before ignore files.

    Returns:
        bool: ``True`` when ``path`` must not be yielded or descended into.
    """

    if overrides is not None:
        decision = overrides.decide(path, is_dir=is_dir)
        if decision is not MatchDecision.NONE:
            return decision is MatchDecision.IGNORE
    for ignore_file in reversed(tuple(ignore_files)):
        decision = ignore_file.decide(path, is_dir=is_dir)
        if decision is not MatchDecision.NONE:
            return decision is MatchDecision.IGNORE
    return False


__all__ = [
    "IGNORE_FILE_NAME",
    "IgnoreFile",
    "MatchDecision",
    "OverrideGlobs",
    "expand_alternates",
    "glob_syntax_error",
    "is_ignored",
    "load_parent_ignore_files",
]
