# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models shared by every formatting job in a run."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ..console import detect_tty


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


class LineEndings(str, Enum):
    """Enumerate line ending styles emitted by the formatter."""

    UNIX = "Unix"
    WINDOWS = "Windows"

    @property
    def separator(self) -> str:
        """Return the literal newline sequence for this style."""

        return "\r\n" if self is LineEndings.WINDOWS else "\n"


class IndentType(str, Enum):
    """Enumerate indentation characters."""

    TABS = "Tabs"
    SPACES = "Spaces"


class QuoteStyle(str, Enum):
    """Enumerate string quote preferences understood by the formatter."""

    AUTO_PREFER_DOUBLE = "AutoPreferDouble"
    AUTO_PREFER_SINGLE = "AutoPreferSingle"
    FORCE_DOUBLE = "ForceDouble"
    FORCE_SINGLE = "ForceSingle"


class ColorChoice(str, Enum):
    """Enumerate colour output preferences accepted on the command line."""

    ALWAYS = "always"
    AUTO = "auto"
    NEVER = "never"

    def should_use_color(self) -> bool:
        """Return whether ANSI colour should be emitted for this preference.

        Returns:
            bool: ``True`` for ``always``, ``False`` for ``never`` and the TTY
            status of stdout for ``auto``.
        """

        if self is ColorChoice.ALWAYS:
            return True
        if self is ColorChoice.NEVER:
            return False
        return detect_tty()


def default_num_threads() -> int:
    """Return the available CPU parallelism, never less than one worker.

    Returns:
        int: Worker count used when ``--num-threads`` is not supplied.
    """

    return max(1, os.cpu_count() or 1)


class FormatConfig(BaseModel):
    """Fully resolved formatting configuration handed to the engine.

    Instances are frozen so a single value can be shared read-only across all
    concurrently running jobs.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    column_width: int = Field(default=120, gt=0)
    line_endings: LineEndings = LineEndings.UNIX
    indent_type: IndentType = IndentType.TABS
    indent_width: int = Field(default=4, gt=0)
    quote_style: QuoteStyle = QuoteStyle.AUTO_PREFER_DOUBLE

    @property
    def indent_unit(self) -> str:
        """Return the text inserted for one level of indentation."""

        if self.indent_type is IndentType.TABS:
            return "\t"
        return " " * self.indent_width


class FormatOverrides(BaseModel):
    """Command-line overrides layered on top of the loaded configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    column_width: int | None = Field(default=None, gt=0)
    line_endings: LineEndings | None = None
    indent_type: IndentType | None = None
    indent_width: int | None = Field(default=None, gt=0)
    quote_style: QuoteStyle | None = None

    def apply(self, config: FormatConfig) -> FormatConfig:
        """Return ``config`` with every explicitly supplied override applied.

        Args:
            config: Configuration resolved from defaults or a config file.

        Returns:
            FormatConfig: New configuration instance including the overrides.
        """

        updates = self.model_dump(exclude_none=True)
        if not updates:
            return config
        return config.model_copy(update=updates)


class RunOptions(BaseModel):
    """Immutable options describing a single formatting run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    files: tuple[str, ...] = ()
    check: bool = False
    globs: tuple[str, ...] | None = None
    range_start: int | None = Field(default=None, ge=0)
    range_end: int | None = Field(default=None, ge=0)
    num_threads: int = Field(default_factory=default_num_threads, ge=1)
    verbose: bool = False
    color: ColorChoice = ColorChoice.AUTO
    config_path: Path | None = None
    search_parent_directories: bool = False
    formatter_command: tuple[str, ...] | None = None
    overrides: FormatOverrides = Field(default_factory=FormatOverrides)

    def use_color(self) -> bool:
        """Return whether diff output should be colourised."""

        return self.color.should_use_color()

    def validate_roots(self) -> None:
        """Ensure at least one root was supplied.

        Raises:
            ConfigError: When ``files`` is empty.
        """

        if not self.files:
            raise ConfigError("error: no files provided")


@dataclass(frozen=True, slots=True)
class FormatRange:
    """Inclusive character-offset span restricting the formatted region."""

    start: int | None = None
    end: int | None = None

    @classmethod
    def from_values(cls, start: int | None, end: int | None) -> FormatRange:
        """Build a range from optional bounds."""

        return cls(start=start, end=end)

    def contains(self, offset: int) -> bool:
        """Return whether ``offset`` lies within the range bounds.

        Args:
            offset: Character offset into the source text.

        Returns:
            bool: ``True`` when neither bound excludes ``offset``.
        """

        if self.start is not None and offset < self.start:
            return False
        if self.end is not None and offset > self.end:
            return False
        return True


def build_range(options: RunOptions) -> FormatRange | None:
    """Return the range requested by ``options`` or ``None`` for whole files."""

    if options.range_start is None and options.range_end is None:
        return None
    return FormatRange.from_values(options.range_start, options.range_end)


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
]
