# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Single-consumer handling of job outcomes and the shared exit status."""

from __future__ import annotations

import queue
from collections.abc import Iterator
from threading import Lock
from typing import IO, Final

from ..interfaces import RunLogger
from .jobs import Completed, DiffAvailable, Failed, JobOutcome

EXIT_SUCCESS: Final[int] = 0
EXIT_FAILURE: Final[int] = 1


class RunStatus:
    """Monotonic success/failure flag shared by the sink and the controller.

    The only transition is success to failure; once failed the status stays
    failed for the rest of the run.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._failed = False

    def mark_failed(self) -> None:
        """Record that at least one diff, job failure or walk error occurred."""

        with self._lock:
            self._failed = True

    @property
    def failed(self) -> bool:
        """Return whether a failure has been recorded."""

        with self._lock:
            return self._failed

    @property
    def exit_code(self) -> int:
        """Return the process exit code derived from the status."""

        return EXIT_FAILURE if self.failed else EXIT_SUCCESS


class _Closed:
    """Sentinel enqueued once no further outcomes will be sent."""


_CLOSED: Final[_Closed] = _Closed()


class OutcomeChannel:
    """Unbounded many-producer, single-consumer channel of job outcomes."""

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[JobOutcome | _Closed] = queue.SimpleQueue()

    def send(self, outcome: JobOutcome) -> None:
        """Deliver ``outcome`` to the consumer."""

        self._queue.put(outcome)

    def close(self) -> None:
        """Signal that every producer has finished sending."""

        self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[JobOutcome]:
        """Yield outcomes in delivery order until the channel is closed."""

        while True:
            item = self._queue.get()
            if isinstance(item, _Closed):
                return
            yield item


class ResultSink:
    """Drain an :class:`OutcomeChannel` one outcome at a time.

    The sink is the only writer of diff output, so diff blocks from different
    jobs can never interleave on the output stream.
    """

    def __init__(
        self,
        channel: OutcomeChannel,
        status: RunStatus,
        *,
        output: IO[bytes],
        logger: RunLogger,
    ) -> None:
        """Create a sink bound to ``channel``.

        Args:
            channel: Channel the formatting jobs send outcomes to.
            status: Shared run status updated on diffs and failures.
            output: Binary stream receiving diff blocks.
            logger: Logger receiving failure messages.
        """

        self._channel = channel
        self._status = status
        self._output = output
        self._logger = logger
        self.processed = 0

    def run(self) -> int:
        """Consume outcomes until the channel is closed.

        Returns:
            int: Number of outcomes processed.
        """

        for outcome in self._channel:
            self.handle(outcome)
        return self.processed

    def handle(self, outcome: JobOutcome) -> None:
        """Act on a single outcome.

        Args:
            outcome: Outcome delivered by a formatting job.
        """

        self.processed += 1
        if isinstance(outcome, Completed):
            return
        if isinstance(outcome, DiffAvailable):
            self._status.mark_failed()
            try:
                self._output.write(outcome.diff)
                self._output.flush()
            except OSError as exc:
                self._logger.fail(str(exc))
            return
        if isinstance(outcome, Failed):
            self._logger.fail(outcome.message)
            self._status.mark_failed()


__all__ = [
    "EXIT_FAILURE",
    "EXIT_SUCCESS",
    "OutcomeChannel",
    "ResultSink",
    "RunStatus",
]
