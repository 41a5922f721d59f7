# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and loaders."""

from __future__ import annotations

from .loader import find_config_file, load_config, read_config_file
from .models import (
    ColorChoice,
    ConfigError,
    FormatConfig,
    FormatOverrides,
    FormatRange,
    IndentType,
    LineEndings,
    QuoteStyle,
    RunOptions,
    build_range,
    default_num_threads,
)

__all__ = [
    "ColorChoice",
    "ConfigError",
    "FormatConfig",
    "FormatOverrides",
    "FormatRange",
    "IndentType",
    "LineEndings",
    "QuoteStyle",
    "RunOptions",
    "build_range",
    "default_num_threads",
    "find_config_file",
    "load_config",
    "read_config_file",
]
