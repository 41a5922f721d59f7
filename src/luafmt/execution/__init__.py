# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Concurrent formatting pipeline."""

from __future__ import annotations

from .dispatcher import JobDispatcher
from .jobs import Completed, DiffAvailable, Failed, JobEnvironment, JobOutcome, run_file_job, run_stdin_job
from .runner import RunStreams, build_engine, run_format
from .sink import EXIT_FAILURE, EXIT_SUCCESS, OutcomeChannel, ResultSink, RunStatus

__all__ = [
    "EXIT_FAILURE",
    "EXIT_SUCCESS",
    "Completed",
    "DiffAvailable",
    "Failed",
    "JobDispatcher",
    "JobEnvironment",
    "JobOutcome",
    "OutcomeChannel",
    "ResultSink",
    "RunStatus",
    "RunStreams",
    "build_engine",
    "run_file_job",
    "run_format",
    "run_stdin_job",
]
