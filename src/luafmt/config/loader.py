# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Locate and load ``stylua.toml`` style configuration files."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError

from .models import ConfigError, FormatConfig, RunOptions

CONFIG_FILE_NAMES: Final[tuple[str, ...]] = ("stylua.toml", ".stylua.toml")
XDG_CONFIG_ENV: Final[str] = "XDG_CONFIG_HOME"
USER_CONFIG_DIR: Final[str] = "stylua"


def read_config_file(path: Path) -> FormatConfig:
    """Parse ``path`` into a :class:`FormatConfig`.

    Args:
        path: TOML document whose top-level keys mirror :class:`FormatConfig`.

    Returns:
        FormatConfig: Validated configuration.

    Raises:
        ConfigError: When the file cannot be read, parsed or validated.
    """

    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"config file not found: {path}: {exc.strerror or exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"config file {path} is not valid TOML: {exc}") from exc
    return _validate(data, path)


def _validate(data: Mapping[str, Any], path: Path) -> FormatConfig:
    try:
        return FormatConfig.model_validate(dict(data))
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}" for error in exc.errors()
        )
        raise ConfigError(f"invalid configuration in {path}: {problems}") from exc


def find_config_file(cwd: Path, *, search_parents: bool, env: Mapping[str, str] | None = None) -> Path | None:
    """Return the first configuration file visible from ``cwd``.

    Args:
        cwd: Directory the search starts from.
        search_parents: Continue into ancestors of ``cwd`` and then the user
            configuration directory when nothing is found locally.
        env: Environment used to resolve ``XDG_CONFIG_HOME``.

    Returns:
        Path | None: Located configuration file, or ``None`` when absent.
    """

    directories = _iter_search_directories(cwd, search_parents=search_parents, env=env or os.environ)
    for directory in directories:
        for name in CONFIG_FILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
    return None


def _iter_search_directories(cwd: Path, *, search_parents: bool, env: Mapping[str, str]) -> Iterator[Path]:
    resolved = cwd.resolve()
    yield resolved
    if not search_parents:
        return
    yield from resolved.parents
    xdg_home = env.get(XDG_CONFIG_ENV)
    if xdg_home:
        yield Path(xdg_home) / USER_CONFIG_DIR
    home = env.get("HOME")
    if home:
        yield Path(home) / ".config" / USER_CONFIG_DIR


def load_config(options: RunOptions, cwd: Path, *, env: Mapping[str, str] | None = None) -> FormatConfig:
    """Resolve the single :class:`FormatConfig` used by every job in a run.

    Args:
        options: Run options carrying the config path and CLI overrides.
        cwd: Working directory used for config file discovery.
        env: Optional environment mapping, defaults to :data:`os.environ`.

    Returns:
        FormatConfig: File configuration (or defaults) with overrides applied.

    Raises:
        ConfigError: When an explicit or discovered config file is invalid.
    """

    if options.config_path is not None:
        path = options.config_path if options.config_path.is_absolute() else cwd / options.config_path
        base = read_config_file(path)
    else:
        located = find_config_file(cwd, search_parents=options.search_parent_directories, env=env)
        base = read_config_file(located) if located is not None else FormatConfig()
    return options.overrides.apply(base)


__all__ = ["CONFIG_FILE_NAMES", "find_config_file", "load_config", "read_config_file"]
