# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock

import pytest


@dataclass
class RecordingLogger:
    """Logger double collecting messages from every pipeline stage."""

    failures: list[str] = field(default_factory=list)
    debug_messages: list[str] = field(default_factory=list)
    _lock: Lock = field(default_factory=Lock)

    def fail(self, message: str) -> None:
        with self._lock:
            self.failures.append(message)

    def debug(self, message: str) -> None:
        with self._lock:
            self.debug_messages.append(message)


@pytest.fixture
def logger() -> RecordingLogger:
    """Return a fresh recording logger."""
    return RecordingLogger()
