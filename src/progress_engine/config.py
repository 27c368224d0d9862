"""Settings for the progress-engine CLI.

Only two things are configurable: where log events go and how reports are
printed. Scheduling thresholds are engine constants and cannot be changed
here.

A TOML file provides ``[logging]`` and ``[report]`` tables; any section the
file leaves out is read from ``PROGRESS_ENGINE_<SECTION>__<KEY>`` variables
and then falls back to the defaults below::

    [logging]
    level = "DEBUG"
    format = "console"

    [report]
    format = "json"
    decimals = 3
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomli
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_FILE_NAME = "progress-engine.toml"
USER_CONFIG_PATH = Path(".config") / "progress-engine" / "config.toml"


class LoggingConfig(BaseSettings):
    """Where log events are written and how they are rendered.

    ``file`` switches output from the CLI's stderr to a rotating log file;
    the rotation fields only apply then.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROGRESS_ENGINE_LOGGING__",
        extra="forbid",
    )

    level: str = Field(default="INFO")
    format: str = Field(default="json")
    file: Path | None = Field(default=None)
    rotation_size_mb: int = Field(default=50, ge=1, le=1000)
    retention_count: int = Field(default=10, ge=1, le=100)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level is recognized."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format is recognized."""
        valid_formats = {"json", "console"}
        v_lower = v.lower()
        if v_lower not in valid_formats:
            raise ValueError(f"Invalid log format: {v}. Must be one of {valid_formats}")
        return v_lower


class ReportConfig(BaseSettings):
    """Report presentation configuration used by the CLI.

    Attributes:
        format: Default output format (table or json)
        decimals: Number of decimal places when rendering fractions and days
    """

    model_config = SettingsConfigDict(
        env_prefix="PROGRESS_ENGINE_REPORT__",
        extra="forbid",
    )

    format: str = Field(default="table")
    decimals: int = Field(default=2, ge=0, le=6)

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate report format is recognized."""
        valid_formats = {"table", "json"}
        v_lower = v.lower()
        if v_lower not in valid_formats:
            raise ValueError(f"Invalid report format: {v}. Must be one of {valid_formats}")
        return v_lower


class EngineConfig(BaseSettings):
    """Logging and report settings for one CLI invocation.

    Nested keys use a double underscore in environment variables, e.g.
    ``PROGRESS_ENGINE_REPORT__DECIMALS=4``.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROGRESS_ENGINE_",
        env_nested_delimiter="__",
        extra="forbid",
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)


def _find_config_file() -> Path | None:
    for candidate in (Path.cwd() / CONFIG_FILE_NAME, Path.home() / USER_CONFIG_PATH):
        if candidate.exists():
            return candidate
    return None


def load_config(config_path: Path | None = None) -> EngineConfig:
    """Build the engine settings.

    Without ``config_path``, ``./progress-engine.toml`` is used if present,
    otherwise ``~/.config/progress-engine/config.toml``. Running with no file
    at all is fine.

    Raises:
        FileNotFoundError: ``config_path`` was given but does not exist.
        ValueError: The file is not valid TOML or holds invalid settings.
    """
    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    source = config_path if config_path is not None else _find_config_file()

    toml_data: dict[str, Any] = {}
    if source is not None:
        with open(source, "rb") as f:
            try:
                toml_data = tomli.load(f)
            except tomli.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {source}: {e}") from e

    try:
        return EngineConfig(**toml_data)
    except ValidationError as e:
        where = f" in {source}" if source is not None else ""
        raise ValueError(f"Invalid configuration{where}: {e}") from e
