# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Formatting jobs executed on the worker pool and the outcomes they produce."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Final

from ..config.models import FormatConfig, FormatRange
from ..errors import JobError, describe_error
from ..formatting.diffing import DEFAULT_CONTEXT_LINES, output_diff
from ..interfaces import FormattingEngine, RunLogger

STDIN_CHECK_MESSAGE: Final[str] = "warning: `--check` cannot be used whilst reading from stdin"
_ENCODING: Final[str] = "utf-8"

DiffRenderer = Callable[[str, str, int, str, bool], bytes | None]


@dataclass(frozen=True, slots=True)
class Completed:
    """Job finished; output was written or there was nothing to report."""


@dataclass(frozen=True, slots=True)
class DiffAvailable:
    """Check mode found a difference; ``diff`` holds the rendered block."""

    diff: bytes


@dataclass(frozen=True, slots=True)
class Failed:
    """Job failed; ``message`` carries the contextual cause chain."""

    message: str


JobOutcome = Completed | DiffAvailable | Failed


@dataclass(frozen=True, slots=True)
class JobEnvironment:
    """Read-only state shared by every job of a run."""

    config: FormatConfig
    format_range: FormatRange | None
    check: bool
    use_color: bool
    engine: FormattingEngine
    logger: RunLogger
    diff_renderer: DiffRenderer = output_diff


def _read_source(path: Path) -> str:
    # newline="" keeps CRLF intact
    with path.open(encoding=_ENCODING, newline="") as handle:
        return handle.read()


def _write_source(path: Path, content: str) -> None:
    with path.open("w", encoding=_ENCODING, newline="") as handle:
        handle.write(content)


def format_file(path: Path, environment: JobEnvironment) -> JobOutcome:
    """Format ``path`` in place, or diff it against its formatted form in check mode.

    Args:
        path: File to format.
        environment: Shared configuration, engine and logger.

    Returns:
        JobOutcome: :class:`DiffAvailable` when check mode found a difference,
        otherwise :class:`Completed`.

    Raises:
        JobError: When reading, formatting, diffing or writing fails. The
            original exception is attached as ``__cause__``.
    """

    try:
        contents = _read_source(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise JobError(f"Failed to read {path}") from exc

    started = time.perf_counter()
    try:
        formatted = environment.engine.format(contents, environment.config, environment.format_range)
    except Exception as exc:
        raise JobError(f"Could not format file {path}") from exc
    elapsed = time.perf_counter() - started
    environment.logger.debug(f"formatted {path} in {elapsed * 1000:.3f}ms")

    if environment.check:
        try:
            diff = environment.diff_renderer(
                contents,
                formatted,
                DEFAULT_CONTEXT_LINES,
                f"Diff in {path}:",
                environment.use_color,
            )
        except Exception as exc:
            raise JobError(f"Failed to create diff for {path}") from exc
        if diff is None:
            return Completed()
        return DiffAvailable(diff=diff)

    try:
        _write_source(path, formatted)
    except OSError as exc:
        raise JobError(f"Could not write to {path}") from exc
    return Completed()


def _read_stdin(source: IO[bytes]) -> str:
    try:
        payload = source.read()
        return payload.decode(_ENCODING) if isinstance(payload, bytes) else str(payload)
    except (OSError, UnicodeDecodeError) as exc:
        raise JobError("Could not format from stdin") from exc


def format_stdin(source: str, environment: JobEnvironment, output: IO[bytes]) -> JobOutcome:
    """Format ``source`` read from stdin and write the result to ``output``.

    Raises:
        JobError: When formatting or writing fails.
    """

    try:
        formatted = environment.engine.format(source, environment.config, environment.format_range)
    except Exception as exc:
        raise JobError("Failed to format from stdin") from exc
    try:
        output.write(formatted.encode(_ENCODING))
        output.flush()
    except OSError as exc:
        raise JobError("Could not output to stdout") from exc
    return Completed()


def run_file_job(path: Path, environment: JobEnvironment) -> JobOutcome:
    """Run :func:`format_file` converting any failure into a :class:`Failed` outcome."""

    try:
        return format_file(path, environment)
    except Exception as exc:
        return Failed(message=describe_error(exc))


def run_stdin_job(environment: JobEnvironment, source: IO[bytes], output: IO[bytes]) -> JobOutcome:
    """Read all of ``source`` and format it, converting failures into :class:`Failed`.

    Check mode is rejected before stdin is read: there is no file to diff
    against.

    Args:
        environment: Shared configuration, engine and logger.
        source: Binary stdin stream.
        output: Binary stdout stream receiving the formatted text.

    Returns:
        JobOutcome: :class:`Completed` or :class:`Failed`.
    """

    if environment.check:
        return Failed(message=STDIN_CHECK_MESSAGE)
    try:
        return format_stdin(_read_stdin(source), environment, output)
    except Exception as exc:
        return Failed(message=describe_error(exc))


__all__ = [
    "STDIN_CHECK_MESSAGE",
    "Completed",
    "DiffAvailable",
    "DiffRenderer",
    "Failed",
    "JobEnvironment",
    "JobOutcome",
    "format_file",
    "format_stdin",
    "run_file_job",
    "run_stdin_job",
]
