"""Settings, analysis constants and logging for Vesper.

``get_logger`` is the entry point used across the package: the first logger
handed out configures logging from the global settings.
"""

from __future__ import annotations

from functools import cache
from typing import Any

from vesper.config import logging as _logging
from vesper.config import settings as _settings
from vesper.config.analysis import AnalysisConfig
from vesper.config.logging import configure_logging
from vesper.config.settings import (
    VesperSettings,
    get_settings,
    get_settings_for_cli,
    set_settings,
)

__all__ = [
    "AnalysisConfig",
    "VesperSettings",
    "configure_logging",
    "get_logger",
    "get_settings",
    "get_settings_for_cli",
    "reset_settings",
    "set_settings",
]


@cache
def _configure_once() -> None:
    configure_logging(get_settings())


@cache
def get_logger(name: str) -> Any:
    """Logger for ``name``, configuring logging on first use."""
    _configure_once()
    return _logging.get_logger(name)


def reset_settings() -> None:
    """Drop the global settings; logging is configured again on next use."""
    _settings.reset_settings()
    _configure_once.cache_clear()
    get_logger.cache_clear()
