# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Service interfaces shared between the CLI and the execution pipeline."""

# pylint: disable=too-few-public-methods

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .config.models import FormatConfig, FormatRange


@runtime_checkable
class RunLogger(Protocol):
    """Logger receiving per-run diagnostics from every pipeline stage."""

    def fail(self, message: str) -> None:
        """Report an error that forces a failing exit status."""

        raise NotImplementedError

    def debug(self, message: str) -> None:
        """Report a verbose-only message."""

        raise NotImplementedError


@runtime_checkable
class FormattingEngine(Protocol):
    """Transform source text into formatted text.

    Implementations are invoked concurrently from several worker threads with
    the same ``config`` value and must therefore keep no per-call shared state.
    """

    def format(self, source: str, config: FormatConfig, format_range: FormatRange | None) -> str:
        """Return the formatted form of ``source``.

        Raises:
            FormatError: When the engine cannot format ``source``.
        """

        raise NotImplementedError


__all__ = ["FormattingEngine", "RunLogger"]
