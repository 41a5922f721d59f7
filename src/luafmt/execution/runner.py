# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Run controller wiring discovery, the worker pool and the result sink."""

from __future__ import annotations

import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Final

from ..config.loader import load_config
from ..config.models import RunOptions, build_range
from ..discovery.filters import should_format
from ..discovery.rules import OverrideGlobs
from ..discovery.walker import PathWalker, StdinEntry, WalkError
from ..formatting.engine import CommandFormatter, WhitespaceFormatter
from ..interfaces import FormattingEngine, RunLogger
from .dispatcher import JobDispatcher
from .jobs import JobEnvironment
from .sink import OutcomeChannel, ResultSink, RunStatus

_THREAD_NAME_PREFIX: Final[str] = "luafmt"
# one worker is reserved for the sink so jobs never wait behind it
_SINK_WORKERS: Final[int] = 1


@dataclass(frozen=True, slots=True)
class RunStreams:
    """Binary standard streams used by a run."""

    stdin: IO[bytes]
    stdout: IO[bytes]

    @classmethod
    def from_sys(cls) -> RunStreams:
        """Return the process' binary stdin and stdout."""

        return cls(stdin=_binary(sys.stdin), stdout=_binary(sys.stdout))


def _binary(stream: IO[str] | IO[bytes]) -> IO[bytes]:
    buffer = getattr(stream, "buffer", None)
    if buffer is not None:
        return buffer
    return stream  # type: ignore[return-value]


def build_engine(options: RunOptions, cwd: Path) -> FormattingEngine:
    """Return the formatting engine requested by ``options``."""

    if options.formatter_command:
        return CommandFormatter(options.formatter_command, cwd=cwd)
    return WhitespaceFormatter()


def run_format(
    options: RunOptions,
    *,
    logger: RunLogger,
    cwd: Path | None = None,
    engine: FormattingEngine | None = None,
    streams: RunStreams | None = None,
) -> int:
    """Format every file discovered from ``options.files`` and return the exit code.

    Args:
        options: Immutable run options.
        logger: Logger receiving errors and verbose output.
        cwd: Working directory for config lookup, override globs and
            relative roots; the process working directory when omitted.
        engine: Formatting engine; derived from ``options`` when omitted.
        streams: Binary stdin/stdout; the process streams when omitted.

    Returns:
        int: ``0`` when every job completed without a diff or error and no
        traversal error occurred, ``1`` otherwise.

    Raises:
        ConfigError: When no roots were supplied, configuration cannot be
            loaded or an override glob cannot be parsed. Nothing has been
            read or written at that point.
    """

    options.validate_roots()
    working_dir = cwd or Path.cwd()
    config = load_config(options, working_dir)
    format_range = build_range(options)
    overrides = OverrideGlobs.compile(options.globs, working_dir) if options.globs is not None else None
    use_default_glob = overrides is None
    resolved_streams = streams or RunStreams.from_sys()

    environment = JobEnvironment(
        config=config,
        format_range=format_range,
        check=options.check,
        use_color=options.use_color(),
        engine=engine or build_engine(options, working_dir),
        logger=logger,
    )
    status = RunStatus()
    channel = OutcomeChannel()
    sink = ResultSink(channel, status, output=resolved_streams.stdout, logger=logger)

    logger.debug(f"creating a pool with {options.num_threads} threads")
    with ThreadPoolExecutor(
        max_workers=options.num_threads + _SINK_WORKERS,
        thread_name_prefix=_THREAD_NAME_PREFIX,
    ) as executor:
        sink_future = executor.submit(sink.run)
        dispatcher = JobDispatcher(executor, channel)
        try:
            for item in PathWalker(options.files, overrides=overrides, cwd=cwd):
                if isinstance(item, WalkError):
                    logger.fail(f"error: could not walk: {item}")
                    status.mark_failed()
                elif isinstance(item, StdinEntry):
                    dispatcher.submit_stdin(environment, resolved_streams.stdin, resolved_streams.stdout)
                elif should_format(item, use_default_glob=use_default_glob):
                    dispatcher.submit_file(item.path, environment)
        finally:
            dispatcher.join()
            channel.close()
        sink_future.result()

    logger.debug(f"processed {sink.processed} of {dispatcher.submitted} jobs")
    return status.exit_code


__all__ = ["RunStreams", "build_engine", "run_format"]
