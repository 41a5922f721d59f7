# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Fire-and-forget submission of formatting jobs onto the worker pool."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Executor, Future, wait
from functools import partial
from pathlib import Path
from typing import IO

from ..errors import describe_error
from .jobs import Failed, JobEnvironment, JobOutcome, run_file_job, run_stdin_job
from .sink import OutcomeChannel


class JobDispatcher:
    """Schedule formatting jobs and guarantee one outcome per job."""

    def __init__(self, executor: Executor, channel: OutcomeChannel) -> None:
        """Create a dispatcher submitting to ``executor``.

        Args:
            executor: Worker pool running the jobs.
            channel: Channel every job reports its outcome to.
        """

        self._executor = executor
        self._channel = channel
        self._pending: list[Future[None]] = []

    @property
    def submitted(self) -> int:
        """Return the number of jobs submitted so far."""

        return len(self._pending)

    def submit_file(self, path: Path, environment: JobEnvironment) -> None:
        """Schedule formatting of ``path`` without waiting for it."""

        self._submit(partial(run_file_job, path, environment))

    def submit_stdin(self, environment: JobEnvironment, source: IO[bytes], output: IO[bytes]) -> None:
        """Schedule formatting of standard input without waiting for it."""

        self._submit(partial(run_stdin_job, environment, source, output))

    def join(self) -> None:
        """Block until every submitted job has delivered its outcome."""

        wait(self._pending)

    def _submit(self, job: Callable[[], JobOutcome]) -> None:
        self._pending.append(self._executor.submit(self._deliver, job))

    def _deliver(self, job: Callable[[], JobOutcome]) -> None:
        """Run ``job`` and send exactly one outcome, whatever happens."""

        try:
            outcome = job()
        except Exception as exc:
            outcome = Failed(message=f"unexpected failure in formatting job: {describe_error(exc)}")
        self._channel.send(outcome)


__all__ = ["JobDispatcher"]
