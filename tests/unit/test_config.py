"""Unit tests for configuration management.

Tests cover:
- Default configuration values
- TOML file loading
- Environment variable overrides
- Validation errors for invalid configurations
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from progress_engine.config import (
    EngineConfig,
    LoggingConfig,
    ReportConfig,
    load_config,
)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test away from real config files and variables."""
    for name in (
        "PROGRESS_ENGINE_LOGGING__LEVEL",
        "PROGRESS_ENGINE_LOGGING__FORMAT",
        "PROGRESS_ENGINE_REPORT__FORMAT",
        "PROGRESS_ENGINE_REPORT__DECIMALS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)


class TestLoggingConfig:
    """Test LoggingConfig defaults and validation."""

    def test_default_values(self) -> None:
        """Test that default logging configuration values are correct."""
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.format == "json"
        assert config.file is None
        assert config.rotation_size_mb == 50
        assert config.retention_count == 10

    def test_level_validation(self) -> None:
        """Test that log level is validated and normalised."""
        assert LoggingConfig(level="debug").level == "DEBUG"
        with pytest.raises(ValidationError):
            LoggingConfig(level="VERBOSE")

    def test_format_validation(self) -> None:
        """Test that log format is validated and normalised."""
        assert LoggingConfig(format="CONSOLE").format == "console"
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")

    def test_rotation_limits(self) -> None:
        """Test that rotation settings are validated within range."""
        with pytest.raises(ValidationError):
            LoggingConfig(rotation_size_mb=0)
        with pytest.raises(ValidationError):
            LoggingConfig(retention_count=101)


class TestReportConfig:
    """Test ReportConfig defaults and validation."""

    def test_default_values(self) -> None:
        """Test that default report configuration values are correct."""
        config = ReportConfig()
        assert config.format == "table"
        assert config.decimals == 2

    def test_format_validation(self) -> None:
        """Test that report format is validated and normalised."""
        assert ReportConfig(format="JSON").format == "json"
        with pytest.raises(ValidationError):
            ReportConfig(format="csv")

    def test_decimals_validation(self) -> None:
        """Test that decimals is validated within range."""
        with pytest.raises(ValidationError):
            ReportConfig(decimals=-1)
        with pytest.raises(ValidationError):
            ReportConfig(decimals=7)


class TestEngineConfig:
    """Test EngineConfig integration."""

    def test_default_values(self) -> None:
        """Test that the root configuration creates all subsections."""
        config = EngineConfig()
        assert isinstance(config.logging, LoggingConfig)
        assert isinstance(config.report, ReportConfig)

    def test_nested_override(self) -> None:
        """Test that nested configuration can be overridden."""
        config = EngineConfig(report=ReportConfig(decimals=4))
        assert config.report.decimals == 4
        assert config.report.format == "table"
        assert config.logging.level == "INFO"

    def test_unknown_section_rejected(self) -> None:
        """Test that unknown sections are rejected."""
        with pytest.raises(ValidationError):
            EngineConfig(database={"url": "sqlite://"})


class TestLoadConfig:
    """Test TOML configuration loading."""

    def test_load_defaults_when_no_file(self) -> None:
        """Test that defaults are loaded when no config file exists."""
        config = load_config()
        assert isinstance(config, EngineConfig)
        assert config.report.decimals == 2

    def test_explicit_path_not_found(self) -> None:
        """Test that FileNotFoundError is raised for missing explicit path."""
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_config(Path("/nonexistent/config.toml"))

    def test_load_from_toml_file(self, tmp_path: Path) -> None:
        """Test loading configuration from a TOML file."""
        config_file = tmp_path / "test.toml"
        config_file.write_text("""
[logging]
level = "DEBUG"
format = "console"

[report]
format = "json"
decimals = 3
""")

        config = load_config(config_file)
        assert config.logging.level == "DEBUG"
        assert config.logging.format == "console"
        assert config.report.format == "json"
        assert config.report.decimals == 3
        # Unspecified values should be defaults
        assert config.logging.retention_count == 10

    def test_load_partial_config(self, tmp_path: Path) -> None:
        """Test loading partial configuration merges with defaults."""
        config_file = tmp_path / "partial.toml"
        config_file.write_text("""
[report]
decimals = 0
""")

        config = load_config(config_file)
        assert config.report.decimals == 0
        assert config.report.format == "table"
        assert config.logging.level == "INFO"

    def test_invalid_value_raises_error(self, tmp_path: Path) -> None:
        """Test that an invalid value raises a ValueError."""
        config_file = tmp_path / "invalid.toml"
        config_file.write_text("""
[report]
decimals = "many"
""")

        with pytest.raises(ValueError, match="Invalid configuration"):
            load_config(config_file)

    def test_invalid_environment_without_file(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that invalid variables are reported when no file is used."""
        monkeypatch.setenv("PROGRESS_ENGINE_REPORT__DECIMALS", "99")

        with pytest.raises(ValueError, match=r"^Invalid configuration: "):
            load_config()

    def test_malformed_toml_raises_error(self, tmp_path: Path) -> None:
        """Test that malformed TOML raises a ValueError."""
        config_file = tmp_path / "broken.toml"
        config_file.write_text("[report\ndecimals = 1\n")

        with pytest.raises(ValueError, match="Invalid TOML"):
            load_config(config_file)

    def test_search_current_directory(self, tmp_path: Path) -> None:
        """Test that load_config searches the current directory."""
        (tmp_path / "progress-engine.toml").write_text("""
[report]
decimals = 5
""")

        config = load_config()
        assert config.report.decimals == 5

    def test_search_user_config_directory(self, tmp_path: Path) -> None:
        """Test that load_config falls back to the user config directory."""
        user_dir = tmp_path / "home" / ".config" / "progress-engine"
        user_dir.mkdir(parents=True)
        (user_dir / "config.toml").write_text("""
[logging]
level = "ERROR"
""")

        config = load_config()
        assert config.logging.level == "ERROR"

    def test_environment_variables_without_toml(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that environment variables work without a TOML file."""
        monkeypatch.setenv("PROGRESS_ENGINE_LOGGING__LEVEL", "WARNING")
        monkeypatch.setenv("PROGRESS_ENGINE_REPORT__DECIMALS", "4")

        config = load_config()
        assert config.logging.level == "WARNING"
        assert config.report.decimals == 4

    def test_environment_fills_sections_missing_from_toml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that sections absent from TOML are read from the environment."""
        config_file = tmp_path / "test.toml"
        config_file.write_text("""
[report]
decimals = 1
""")
        monkeypatch.setenv("PROGRESS_ENGINE_LOGGING__LEVEL", "ERROR")

        config = load_config(config_file)
        assert config.report.decimals == 1
        assert config.logging.level == "ERROR"
