"""Vesper settings.

Precedence, highest first: CLI flags, config files (later files win),
``VESPER_*`` environment variables, ``.env``, field defaults.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any, BinaryIO

import yaml
from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vesper.config.analysis import AnalysisConfig
from vesper.exceptions import ConfigurationError, check_config_keys

_LOADERS: dict[str, Callable[[BinaryIO], Any]] = {
    ".yml": yaml.safe_load,
    ".yaml": yaml.safe_load,
    ".toml": tomllib.load,
    ".json": json.load,
}

# Searched by get_settings(), lowest priority first
_USER_CONFIG_DIR = Path("~/.config/vesper")
_DEFAULT_CONFIG_FILES = (
    _USER_CONFIG_DIR / "config.yaml",
    _USER_CONFIG_DIR / "config.toml",
    Path("vesper.yaml"),
    Path("vesper.toml"),
    Path("vesper.json"),
)


class VesperSettings(BaseSettings):
    """Runtime settings: storage, logging, heuristics, enrichment and API."""

    model_config = SettingsConfigDict(
        env_prefix="VESPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_path: Path = Field(
        default_factory=lambda: Path.cwd() / "vesper.db",
        description="SQLite database file",
    )
    database_timeout: float = Field(
        default=30.0, ge=0.1, description="Seconds to wait on a locked database"
    )

    debug: bool = False
    log_level: str = Field(
        default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$"
    )
    log_format: str = Field(default="console", pattern="^(console|json|structured)$")
    log_file: Path | None = None

    # Heuristic constants, see AnalysisConfig
    lines_per_page: int = Field(default=60, ge=1)
    cue_max_length: int = Field(default=30, ge=4)
    success_threshold: float = Field(default=7.0, ge=0.0, le=10.0)
    comparable_min_rating: float = Field(default=7.0, ge=0.0, le=10.0)
    comparable_limit: int = Field(default=10, ge=1)
    reference_pages: int = Field(default=110, ge=1)
    probability_ceiling: float = Field(default=0.95, gt=0.0, le=1.0)
    top_genre_limit: int = Field(default=5, ge=1)

    batch_delay: float = Field(
        default=0.5, ge=0.0, description="Pause between scripts in a batch parse"
    )

    tmdb_api_key: str | None = None
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    tmdb_timeout: float = Field(default=30.0, gt=0.0)
    enrichment_delay: float = Field(
        default=0.25, ge=0.0, description="Pause between genre lookups"
    )
    success_data_delay: float = Field(
        default=0.3, ge=0.0, description="Pause between cast and awards lookups"
    )

    api_host: str = "127.0.0.1"
    api_port: int = Field(default=3001, ge=1, le=65535)
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"]
    )

    @field_validator("database_path", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path | None:
        """Expand ``$VARS`` and ``~`` and make the path absolute."""
        if v is None:
            return None
        if isinstance(v, (dict, list, set, tuple)):  # noqa: UP038
            raise ValueError(f"Expected a path, got {type(v).__name__}: {v!r}")
        if isinstance(v, str):
            v = os.path.expandvars(v)
        return Path(v).expanduser().resolve()

    @field_validator("log_level", "log_format", mode="before")
    @classmethod
    def normalize_case(cls, v: Any, info: ValidationInfo) -> str:
        """Accept any casing; levels are stored upper, formats lower."""
        if not isinstance(v, str):
            raise ValueError(
                f"{info.field_name} must be a string, got {type(v).__name__}"
            )
        return v.upper() if info.field_name == "log_level" else v.lower()

    def analysis_config(self) -> AnalysisConfig:
        """The heuristic constants as an ``AnalysisConfig``."""
        return AnalysisConfig(
            **{name: getattr(self, name) for name in AnalysisConfig.model_fields}
        )

    @classmethod
    def from_env(cls) -> VesperSettings:
        return cls()

    @classmethod
    def from_file(cls, config_path: Path | str) -> VesperSettings:
        """Settings from one YAML, TOML or JSON file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigurationError: If the format is unknown or the content is not
                a mapping of valid keys.
        """
        return cls(**load_config_file(Path(config_path)))

    @classmethod
    def from_multiple_sources(
        cls,
        config_files: Iterable[Path | str] | None = None,
        env_file: Path | str | None = None,
        cli_args: dict[str, Any] | None = None,
    ) -> VesperSettings:
        """Merge config files and CLI arguments over the environment.

        Missing config files are logged and skipped. ``None`` values in
        ``cli_args`` mean "not given" and are dropped.
        """
        data: dict[str, Any] = {}
        for config_file in config_files or ():
            try:
                data |= load_config_file(Path(config_file))
            except FileNotFoundError:
                from vesper.config.logging import get_logger

                get_logger(__name__).warning(
                    "Skipping missing configuration file", config_file=str(config_file)
                )
        data |= _given(cli_args)

        if env_file:
            return cls(_env_file=env_file, **data)  # type: ignore[call-arg]
        return cls(**data)


def _given(values: dict[str, Any] | None) -> dict[str, Any]:
    return {k: v for k, v in (values or {}).items() if v is not None}


def load_config_file(config_path: Path) -> dict[str, Any]:
    """Read a config file into a dict of setting values."""
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    suffix = config_path.suffix.lower()
    loader = _LOADERS.get(suffix)
    if loader is None:
        raise ConfigurationError(
            f"Unsupported configuration file format: {suffix or '(none)'}",
            hint="Use a .yml, .yaml, .toml or .json file",
            details={"file": str(config_path), "supported_formats": list(_LOADERS)},
        )

    with config_path.open("rb") as f:
        data = loader(f)
    if data is None and suffix in {".yml", ".yaml"}:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Configuration file must contain a mapping at the top level",
            details={"file": str(config_path), "found": type(data).__name__},
        )

    check_config_keys(data)
    return data


def discover_config_files() -> list[Path]:
    """Default config files that exist, lowest priority first."""
    found = []
    for candidate in _DEFAULT_CONFIG_FILES:
        path = candidate.expanduser()
        try:
            if path.is_file():
                found.append(path.resolve())
        except OSError:
            continue
    return found


_settings: VesperSettings | None = None


def get_settings() -> VesperSettings:
    """The process-wide settings, loaded on first call."""
    global _settings
    if _settings is None:
        _settings = VesperSettings.from_multiple_sources(discover_config_files())
    return _settings


def set_settings(settings: VesperSettings) -> None:
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Forget the global settings so the next get_settings() reloads them."""
    global _settings
    _settings = None


def get_settings_for_cli(
    config_file: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> VesperSettings:
    """Settings for a CLI invocation.

    With ``config_file`` the settings are built from that file alone (plus
    environment); otherwise the global settings are used. Non-``None``
    overrides are applied on top either way.

    Raises:
        FileNotFoundError: If ``config_file`` is given but does not exist.
    """
    if config_file is not None:
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
        return VesperSettings.from_multiple_sources([config_file], cli_args=cli_overrides)

    settings = get_settings()
    overrides = _given(cli_overrides)
    if not overrides:
        return settings
    return VesperSettings(**(settings.model_dump() | overrides))
