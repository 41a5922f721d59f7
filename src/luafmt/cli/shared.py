# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (logging and errors)."""

from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console
from rich.text import Text

from ..console import get_console_manager
from ..logging import fail as core_fail


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLILogger:
    """Adapter around project logging helpers respecting CLI presentation settings."""

    console: Console
    use_emoji: bool
    use_color: bool
    debug_enabled: bool = False

    def fail(self, message: str) -> None:
        """Log a failure message to stderr.

        Args:
            message: Text describing the failure state.
        """

        core_fail(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def debug(self, message: str) -> None:
        """Emit a debug message when verbose output is enabled.

        Args:
            message: Verbose-only text such as per-file timings.
        """

        if not self.debug_enabled:
            return
        self.console.print(Text(message, style="dim" if self.use_color else ""))


def build_cli_logger(*, emoji: bool, debug: bool = False, color: bool = True) -> CLILogger:
    """Return a ``CLILogger`` writing to stderr.

    Args:
        emoji: Whether log output may include emoji glyphs.
        debug: Whether verbose logging should be enabled.
        color: Whether terminal colour output may be used.

    Returns:
        CLILogger: Logger instance bound to the shared stderr console.
    """

    console = get_console_manager().get(color=color, emoji=emoji)
    return CLILogger(console=console, use_emoji=emoji, use_color=color, debug_enabled=debug)


__all__ = ["CLIError", "CLILogger", "build_cli_logger"]
