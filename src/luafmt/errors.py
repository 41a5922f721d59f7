# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception types raised while formatting individual files."""

from __future__ import annotations


class FormatError(RuntimeError):
    """Raised by a formatting engine when source text cannot be formatted."""


class DiffError(RuntimeError):
    """Raised when a unified diff cannot be rendered."""


class JobError(RuntimeError):
    """Contextual wrapper raised from a job with the original error as ``__cause__``."""


def describe_error(exc: BaseException) -> str:
    """Return ``exc`` and its cause chain rendered on a single line.

    Args:
        exc: Outermost exception, typically a :class:`JobError`.

    Returns:
        str: Messages joined by ``": "`` from outermost to innermost cause.
    """

    parts: list[str] = []
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        message = str(current).strip() or type(current).__name__
        if message not in parts:
            parts.append(message)
        current = current.__cause__
    return ": ".join(parts)


__all__ = ["DiffError", "FormatError", "JobError", "describe_error"]
