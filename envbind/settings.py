"""Runtime settings of the envbind command line tool, bound with envbind itself."""
from __future__ import annotations

from typing import Mapping, Optional

from envbind.fields import EnvModel, env
from envbind.resolver import unmarshal

ENV_PREFIX = "ENVBIND_"


class ToolSettings(EnvModel):
    """Settings read from ``ENVBIND_*`` variables."""

    log_level: str = env(
        "ENVBIND_LOG_LEVEL",
        default="WARNING",
        comment="Minimum level of envbind log records.",
    )
    debug: bool = env(
        "ENVBIND_DEBUG",
        default="false",
        comment="Verbose, colourised logging with tracebacks.",
    )
    env_file: str = env(
        "ENVBIND_ENV_FILE",
        default="",
        comment="Optional .env file layered under the process environment.",
    )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> ToolSettings:
    """Bind :class:`ToolSettings`; raises the first field error."""

    settings = ToolSettings()
    unmarshal(settings, environ=environ)
    return settings


__all__ = ["ENV_PREFIX", "ToolSettings", "load_settings"]
