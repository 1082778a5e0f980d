"""Logging setup for envbind built on loguru.

The package disables its own records on import, following loguru's advice for
libraries. Applications that want to see how their configuration was resolved
call :func:`setup_logging`, which installs a console handler and re-enables
the ``envbind`` records.
"""
from __future__ import annotations

import sys
from typing import IO, TYPE_CHECKING, Any, Optional

from loguru import logger

if TYPE_CHECKING:  # pragma: no cover
    from envbind.resolver import Report

PACKAGE = "envbind"

DEBUG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
DEFAULT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"


class EnvBindLogger:
    """Owns the loguru handler installed for envbind output."""

    def __init__(self) -> None:
        self.is_configured = False
        self.handler_id: Optional[int] = None

    def configure_logging(
        self,
        level: str = "INFO",
        sink: Optional[IO[str]] = None,
        *,
        debug: bool = False,
    ) -> None:
        """Install a single console handler, replacing a previous one."""

        if self.is_configured and self.handler_id is not None:
            logger.remove(self.handler_id)
        else:
            # drop loguru's default stderr handler
            logger.remove()

        self.handler_id = logger.add(
            sink if sink is not None else sys.stderr,
            format=DEBUG_FORMAT if debug else DEFAULT_FORMAT,
            level="DEBUG" if debug else level.upper(),
            colorize=debug,
            backtrace=debug,
            diagnose=debug,
        )
        logger.enable(PACKAGE)
        self.is_configured = True
        logger.debug("Logging configured at level {}", "DEBUG" if debug else level.upper())

    def reset(self) -> None:
        if self.handler_id is not None:
            logger.remove(self.handler_id)
        self.handler_id = None
        self.is_configured = False
        logger.disable(PACKAGE)


_logger_instance: Optional[EnvBindLogger] = None


def get_logger() -> EnvBindLogger:
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = EnvBindLogger()
    return _logger_instance


def setup_logging(
    level: str = "INFO",
    sink: Optional[IO[str]] = None,
    *,
    debug: bool = False,
) -> EnvBindLogger:
    """Configure envbind logging and return the shared configurator."""

    instance = get_logger()
    instance.configure_logging(level, sink, debug=debug)
    return instance


def log_report(report: "Report", **context: Any) -> None:
    """Summarise a resolution pass, one record per failed field."""

    bound = logger.bind(**context)
    failed = [outcome for outcome in report if not outcome.ok]
    if report.failure is not None:
        bound.error("Configuration could not be inspected: {}", report.failure)
        return
    if not failed:
        bound.info("Configuration resolved: {} fields OK", len(report))
        return
    for outcome in failed:
        bound.error("{}: {}", outcome.key or outcome.field_name, outcome.error)
    bound.warning("Configuration resolved with {} of {} fields failing", len(failed), len(report))


__all__ = [
    "DEBUG_FORMAT",
    "DEFAULT_FORMAT",
    "EnvBindLogger",
    "get_logger",
    "log_report",
    "setup_logging",
]
