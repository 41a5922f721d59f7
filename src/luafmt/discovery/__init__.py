# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Discovery helpers for the luafmt package."""

from __future__ import annotations

from .filters import DEFAULT_GLOB, matches_default_glob, should_format
from .rules import IGNORE_FILE_NAME, IgnoreFile, MatchDecision, OverrideGlobs, is_ignored
from .walker import STDIN_MARKER, DiscoveredEntry, FileEntry, PathWalker, StdinEntry, WalkError, WalkItem

__all__ = [
    "DEFAULT_GLOB",
    "IGNORE_FILE_NAME",
    "STDIN_MARKER",
    "DiscoveredEntry",
    "FileEntry",
    "IgnoreFile",
    "MatchDecision",
    "OverrideGlobs",
    "PathWalker",
    "StdinEntry",
    "WalkError",
    "WalkItem",
    "is_ignored",
    "matches_default_glob",
    "should_format",
]
