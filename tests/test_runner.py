# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""End-to-end tests for the run controller and job dispatcher."""

from __future__ import annotations

import io
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from luafmt.config import ColorChoice, ConfigError, FormatConfig, RunOptions
from luafmt.execution import (
    EXIT_FAILURE,
    EXIT_SUCCESS,
    Completed,
    Failed,
    JobDispatcher,
    JobEnvironment,
    OutcomeChannel,
    RunStreams,
    run_format,
)
from luafmt.formatting import WhitespaceFormatter

from .conftest import RecordingLogger

DIRTY = "if x then\n    y()  \nend"
CLEAN = "if x then\n\ty()\nend\n"


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _options(*files: Path | str, **values: object) -> RunOptions:
    values.setdefault("num_threads", 2)
    values.setdefault("color", ColorChoice.NEVER)
    return RunOptions(files=tuple(str(item) for item in files), **values)  # type: ignore[arg-type]


def _run(
    options: RunOptions,
    logger: RecordingLogger,
    cwd: Path,
    *,
    stdin: bytes = b"",
) -> tuple[int, bytes]:
    stdout = io.BytesIO()
    streams = RunStreams(stdin=io.BytesIO(stdin), stdout=stdout)
    exit_code = run_format(options, logger=logger, cwd=cwd, streams=streams)
    return exit_code, stdout.getvalue()


def test_check_mode_reports_diff_and_leaves_file(tmp_path: Path, logger: RecordingLogger) -> None:
    target = _write(tmp_path / "a.lua", DIRTY)

    exit_code, output = _run(_options(target, check=True), logger, tmp_path)

    assert exit_code == EXIT_FAILURE
    assert output.decode("utf-8").startswith(f"Diff in {target}:")
    assert target.read_text(encoding="utf-8") == DIRTY


def test_check_mode_on_clean_tree_succeeds(tmp_path: Path, logger: RecordingLogger) -> None:
    _write(tmp_path / "a.lua", CLEAN)
    _write(tmp_path / "sub" / "b.lua", CLEAN)

    exit_code, output = _run(_options(tmp_path, check=True), logger, tmp_path)

    assert exit_code == EXIT_SUCCESS
    assert output == b""
    assert logger.failures == []


def test_write_mode_formats_in_place(tmp_path: Path, logger: RecordingLogger) -> None:
    target = _write(tmp_path / "a.lua", DIRTY)

    exit_code, output = _run(_options(tmp_path), logger, tmp_path)

    assert exit_code == EXIT_SUCCESS
    assert output == b""
    assert target.read_text(encoding="utf-8") == CLEAN


def test_verbose_logging_reports_pool_size(tmp_path: Path, logger: RecordingLogger) -> None:
    _write(tmp_path / "a.lua", CLEAN)

    _run(_options(tmp_path, num_threads=3), logger, tmp_path)

    assert "creating a pool with 3 threads" in logger.debug_messages


def test_missing_roots_abort_before_any_work(tmp_path: Path, logger: RecordingLogger) -> None:
    with pytest.raises(ConfigError, match="no files provided"):
        _run(_options(), logger, tmp_path)


def test_invalid_config_aborts_before_any_work(tmp_path: Path, logger: RecordingLogger) -> None:
    _write(tmp_path / "stylua.toml", "indent_width = 'wide'\n")
    target = _write(tmp_path / "a.lua", DIRTY)

    with pytest.raises(ConfigError, match="invalid configuration"):
        _run(_options(target), logger, tmp_path)

    assert target.read_text(encoding="utf-8") == DIRTY


def test_config_file_in_working_directory_is_applied(tmp_path: Path, logger: RecordingLogger) -> None:
    _write(tmp_path / "stylua.toml", "indent_width = 2\n")
    target = _write(tmp_path / "a.lua", DIRTY)

    exit_code, _ = _run(_options(target), logger, tmp_path)

    assert exit_code == EXIT_SUCCESS
    assert target.read_text(encoding="utf-8") == "if x then\n\t\ty()\nend\n"


def test_explicit_non_lua_file_is_formatted(tmp_path: Path, logger: RecordingLogger) -> None:
    target = _write(tmp_path / "script.txt", DIRTY)

    exit_code, _ = _run(_options(target), logger, tmp_path)

    assert exit_code == EXIT_SUCCESS
    assert target.read_text(encoding="utf-8") == CLEAN


def test_directory_walk_skips_non_lua_files(tmp_path: Path, logger: RecordingLogger) -> None:
    lua = _write(tmp_path / "a.lua", DIRTY)
    other = _write(tmp_path / "notes.txt", DIRTY)

    _run(_options(tmp_path), logger, tmp_path)

    assert lua.read_text(encoding="utf-8") == CLEAN
    assert other.read_text(encoding="utf-8") == DIRTY


def test_globs_replace_default_extension_filter(tmp_path: Path, logger: RecordingLogger) -> None:
    lua = _write(tmp_path / "a.lua", DIRTY)
    luau = _write(tmp_path / "b.luau", DIRTY)

    _run(_options(tmp_path, globs=("*.luau",)), logger, tmp_path)

    assert lua.read_text(encoding="utf-8") == DIRTY
    assert luau.read_text(encoding="utf-8") == CLEAN


def test_stdin_is_formatted_to_stdout(tmp_path: Path, logger: RecordingLogger) -> None:
    exit_code, output = _run(_options("-"), logger, tmp_path, stdin=DIRTY.encode("utf-8"))

    assert exit_code == EXIT_SUCCESS
    assert output.decode("utf-8") == CLEAN


def test_stdin_with_check_fails_without_output(tmp_path: Path, logger: RecordingLogger) -> None:
    exit_code, output = _run(_options("-", check=True), logger, tmp_path, stdin=DIRTY.encode("utf-8"))

    assert exit_code == EXIT_FAILURE
    assert output == b""
    assert logger.failures == ["warning: `--check` cannot be used whilst reading from stdin"]


def test_walk_error_fails_run_but_other_roots_complete(tmp_path: Path, logger: RecordingLogger) -> None:
    target = _write(tmp_path / "a.lua", DIRTY)

    exit_code, _ = _run(_options(tmp_path / "absent", target), logger, tmp_path)

    assert exit_code == EXIT_FAILURE
    assert len(logger.failures) == 1
    assert logger.failures[0].startswith("error: could not walk: ")
    assert target.read_text(encoding="utf-8") == CLEAN


def test_read_failure_does_not_stop_other_jobs(tmp_path: Path, logger: RecordingLogger) -> None:
    broken = tmp_path / "broken.lua"
    broken.write_bytes(b"\xff\xfe")
    good = _write(tmp_path / "good.lua", DIRTY)

    exit_code, _ = _run(_options(tmp_path), logger, tmp_path)

    assert exit_code == EXIT_FAILURE
    assert [message for message in logger.failures if message.startswith("Failed to read")]
    assert good.read_text(encoding="utf-8") == CLEAN


def test_many_files_produce_intact_diff_blocks(tmp_path: Path, logger: RecordingLogger) -> None:
    body = "".join(f"    local v{index} = {index}  \n" for index in range(40))
    for index in range(60):
        _write(tmp_path / f"dir{index % 5}" / f"file{index}.lua", f"do\n{body}end\n")

    exit_code, output = _run(_options(tmp_path, check=True, num_threads=4), logger, tmp_path)

    assert exit_code == EXIT_FAILURE
    text = output.decode("utf-8")
    blocks = text.split("Diff in ")[1:]
    assert len(blocks) == 60
    for block in blocks:
        removed = [line for line in block.splitlines() if line.startswith("-    local")]
        added = [line for line in block.splitlines() if line.startswith("+\tlocal")]
        assert len(removed) == len(added) == 40


def test_dispatcher_reports_unexpected_job_crash(
    tmp_path: Path,
    logger: RecordingLogger,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def _crash(path: Path, environment: JobEnvironment) -> None:
        raise RuntimeError("worker exploded")

    monkeypatch.setattr("luafmt.execution.dispatcher.run_file_job", _crash)
    environment = JobEnvironment(
        config=FormatConfig(),
        format_range=None,
        check=False,
        use_color=False,
        engine=WhitespaceFormatter(),
        logger=logger,
    )
    channel = OutcomeChannel()

    with ThreadPoolExecutor(max_workers=2) as executor:
        dispatcher = JobDispatcher(executor, channel)
        dispatcher.submit_file(tmp_path / "a.lua", environment)
        dispatcher.join()
    channel.close()

    assert dispatcher.submitted == 1
    assert list(channel) == [Failed(message="unexpected failure in formatting job: worker exploded")]


def test_dispatcher_delivers_one_outcome_per_job(tmp_path: Path, logger: RecordingLogger) -> None:
    paths = [_write(tmp_path / f"f{index}.lua", CLEAN) for index in range(25)]
    environment = JobEnvironment(
        config=FormatConfig(),
        format_range=None,
        check=True,
        use_color=False,
        engine=WhitespaceFormatter(),
        logger=logger,
    )
    channel = OutcomeChannel()

    with ThreadPoolExecutor(max_workers=4) as executor:
        dispatcher = JobDispatcher(executor, channel)
        for path in paths:
            dispatcher.submit_file(path, environment)
        dispatcher.join()
    channel.close()

    assert list(channel) == [Completed()] * 25


def test_overlapping_roots_format_each_file_once(tmp_path: Path, logger: RecordingLogger) -> None:
    target = _write(tmp_path / "sub" / "a.lua", DIRTY)

    exit_code, output = _run(_options(tmp_path, target, check=True), logger, tmp_path)

    assert exit_code == EXIT_FAILURE
    text = output.decode("utf-8")
    assert text.count("Diff in ") == 1
    assert f"Diff in {target}:" in text


def test_repeated_roots_format_each_file_once(tmp_path: Path, logger: RecordingLogger) -> None:
    target = _write(tmp_path / "a.lua", DIRTY)

    exit_code, output = _run(_options(target, target, tmp_path, tmp_path, check=True), logger, tmp_path)

    assert exit_code == EXIT_FAILURE
    assert output.decode("utf-8").count("Diff in ") == 1


def test_explicit_root_wins_over_directory_walk(tmp_path: Path, logger: RecordingLogger) -> None:
    script = _write(tmp_path / "script.txt", DIRTY)

    exit_code, _ = _run(_options(tmp_path, script), logger, tmp_path)

    assert exit_code == EXIT_SUCCESS
    assert script.read_text(encoding="utf-8") == CLEAN


def test_relative_roots_resolve_against_working_directory(tmp_path: Path, logger: RecordingLogger) -> None:
    _write(tmp_path / "pkg" / "a.lua", DIRTY)

    exit_code, output = _run(_options("pkg", check=True), logger, tmp_path)

    assert exit_code == EXIT_FAILURE
    assert logger.failures == []
    assert output.decode("utf-8").startswith(f"Diff in {tmp_path / 'pkg' / 'a.lua'}:")
