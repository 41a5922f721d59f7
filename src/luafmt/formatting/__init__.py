# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Formatting engines and diff rendering."""

from __future__ import annotations

from .diffing import DEFAULT_CONTEXT_LINES, output_diff
from .engine import CommandFormatter, WhitespaceFormatter

__all__ = ["DEFAULT_CONTEXT_LINES", "CommandFormatter", "WhitespaceFormatter", "output_diff"]
