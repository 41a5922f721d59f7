# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point."""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Annotated

import typer

from ..config.models import (
    ColorChoice,
    ConfigError,
    FormatOverrides,
    IndentType,
    LineEndings,
    QuoteStyle,
    RunOptions,
    default_num_threads,
)
from ..execution.runner import run_format
from .shared import CLIError, CLILogger, build_cli_logger

app = typer.Typer(
    name="luafmt",
    help="Format Lua source files in parallel.",
    add_completion=False,
    pretty_exceptions_enable=False,
)


def _execute(options: RunOptions, *, logger: CLILogger) -> int:
    """Run the formatter translating configuration errors into :class:`CLIError`.

    Args:
        options: Options assembled from the command line.
        logger: Logger bound to stderr.

    Returns:
        int: Exit code reported by the run.

    Raises:
        CLIError: When the run aborted before dispatching any work.
    """

    try:
        return run_format(options, logger=logger)
    except ConfigError as exc:
        raise CLIError(str(exc)) from exc


@app.command()
def main(
    files: Annotated[
        list[str] | None,
        typer.Argument(help="Files or directories to format, '-' reads from stdin.", show_default=False),
    ] = None,
    check: Annotated[
        bool,
        typer.Option("--check", "-c", help="Print a diff instead of writing files; exit 1 when anything differs."),
    ] = False,
    glob: Annotated[
        list[str] | None,
        typer.Option(
            "--glob",
            "-g",
            help="Glob selecting files during directory traversal, '!' prefix excludes. Replaces '**/*.lua'.",
        ),
    ] = None,
    num_threads: Annotated[
        int,
        typer.Option("--num-threads", min=1, help="Number of worker threads formatting files."),
    ] = default_num_threads(),
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Print timing and pool details.")] = False,
    color: Annotated[
        ColorChoice,
        typer.Option("--color", case_sensitive=False, help="Colour diff and log output."),
    ] = ColorChoice.AUTO,
    range_start: Annotated[
        int | None,
        typer.Option("--range-start", min=0, help="Character offset where formatting starts."),
    ] = None,
    range_end: Annotated[
        int | None,
        typer.Option("--range-end", min=0, help="Character offset where formatting ends."),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config-path", "-f", help="Explicit configuration file, skipping discovery."),
    ] = None,
    search_parent_directories: Annotated[
        bool,
        typer.Option(
            "--search-parent-directories",
            "-s",
            help="Look for stylua.toml in parent and user configuration directories.",
        ),
    ] = False,
    formatter_command: Annotated[
        str | None,
        typer.Option("--formatter-command", help="External stylua-compatible command, e.g. 'stylua -'."),
    ] = None,
    column_width: Annotated[int | None, typer.Option("--column-width", min=1)] = None,
    line_endings: Annotated[LineEndings | None, typer.Option("--line-endings")] = None,
    indent_type: Annotated[IndentType | None, typer.Option("--indent-type")] = None,
    indent_width: Annotated[int | None, typer.Option("--indent-width", min=1)] = None,
    quote_style: Annotated[QuoteStyle | None, typer.Option("--quote-style")] = None,
) -> None:
    """Format FILES in place, or report diffs with --check."""

    use_color = color.should_use_color()
    logger = build_cli_logger(emoji=False, debug=verbose, color=use_color)
    command = tuple(shlex.split(formatter_command)) if formatter_command else None
    options = RunOptions(
        files=tuple(files or ()),
        check=check,
        globs=tuple(glob) if glob else None,
        range_start=range_start,
        range_end=range_end,
        num_threads=num_threads,
        verbose=verbose,
        color=color,
        config_path=config_path,
        search_parent_directories=search_parent_directories,
        formatter_command=command or None,
        overrides=FormatOverrides(
            column_width=column_width,
            line_endings=line_endings,
            indent_type=indent_type,
            indent_width=indent_width,
            quote_style=quote_style,
        ),
    )
    try:
        exit_code = _execute(options, logger=logger)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    raise typer.Exit(code=exit_code)


__all__ = ["app", "main"]
