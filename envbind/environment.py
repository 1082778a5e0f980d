"""Environment sources: the live process table, injected mappings and .env files."""
from __future__ import annotations

import os
from collections import ChainMap
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values
from loguru import logger

from envbind.errors import EnvBindError

DEFAULT_ENV_FILENAME = ".env"

ENV_LAYER = "env"
ENV_FILE_LAYER = "env-file"
DEFAULT_LAYER = "default"


def load_env_file(path: Path | str) -> Dict[str, str]:
    """Read ``path`` with python-dotenv, dropping keys declared without a value."""

    env_path = Path(path)
    if not env_path.is_file():
        raise EnvBindError(f"env file not found: {env_path}")
    values = {
        key: value
        for key, value in dotenv_values(env_path, verbose=False).items()
        if value is not None
    }
    logger.debug("Loaded {} entries from {}", len(values), env_path)
    return values


def build_environment(
    environ: Optional[Mapping[str, str]] = None,
    env_file: Path | str | None = None,
) -> Mapping[str, str]:
    """Return the mapping variables are looked up in.

    Without arguments this is ``os.environ`` itself, so every lookup reads the
    live process table. Values from ``env_file`` sit below the runtime layer.
    """

    runtime = os.environ if environ is None else environ
    if env_file is None:
        return runtime
    return ChainMap(runtime, load_env_file(env_file))  # type: ignore[arg-type]


def source_of(environ: Mapping[str, str], key: str) -> str:
    """Name the layer that supplies ``key``."""

    if isinstance(environ, ChainMap) and key not in environ.maps[0]:
        return ENV_FILE_LAYER
    return ENV_LAYER


__all__ = [
    "DEFAULT_ENV_FILENAME",
    "DEFAULT_LAYER",
    "ENV_FILE_LAYER",
    "ENV_LAYER",
    "build_environment",
    "load_env_file",
    "source_of",
]
