"""structlog on top of stdlib logging.

All output goes to stderr (and optionally a rotating log file) so that
``--json`` command output on stdout stays machine readable.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.processors import CallsiteParameter

from vesper.config.settings import VesperSettings

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

_DEBUG_CALLSITE = (
    CallsiteParameter.FILENAME,
    CallsiteParameter.LINENO,
    CallsiteParameter.FUNC_NAME,
)


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        known = ", ".join(sorted(logging.getLevelNamesMapping()))
        raise ValueError(f"Invalid log level '{name}'. Valid levels are: {known}")
    return level


def _renderer(log_format: str) -> Any:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    if log_format == "structured":
        return structlog.processors.KeyValueRenderer(
            key_order=["timestamp", "level", "logger", "event"], drop_missing=True
        )
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def _handlers(settings: VesperSettings, level: int) -> list[logging.Handler]:
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=_renderer(settings.log_format),
        foreign_pre_chain=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.stdlib.add_logger_name,
        ],
    )
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.log_file:
        path = Path(settings.log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                path,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
    return handlers


def configure_logging(settings: VesperSettings) -> None:
    """Route structlog through stdlib handlers configured from ``settings``.

    Raises:
        ValueError: If ``settings.log_level`` names no logging level.
    """
    level = _resolve_level(settings.log_level)
    logging.basicConfig(
        level=level, handlers=_handlers(settings, level), force=True
    )

    chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.dict_tracebacks,
    ]
    if settings.debug:
        chain.append(
            structlog.processors.CallsiteParameterAdder(parameters=_DEBUG_CALLSITE)
        )
    chain.append(structlog.processors.format_exc_info)

    # caplog only captures records that reach the stdlib formatter
    under_pytest = "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ
    if under_pytest or settings.log_format != "console":
        chain += [
            structlog.stdlib.render_to_log_kwargs,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ]
    else:
        chain.append(_renderer("console"))

    structlog.configure(
        processors=chain,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """A structlog logger for ``name``; does not configure anything."""
    return structlog.get_logger(name)
