"""
Configuration tests.
"""

from pathlib import Path

import pytest

from voldash.config import (
    AppConfig,
    ConfigValidationError,
    load_config,
)


@pytest.fixture
def store_env(monkeypatch):
    """Store credentials in the environment."""
    monkeypatch.setenv("SUPABASE_URL", "https://project.example.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "public-key")


@pytest.fixture
def no_store_env(monkeypatch):
    """No store credentials in the environment."""
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)


class TestLoadConfig:
    """Test configuration loading."""

    def test_defaults_from_environment(self, store_env):
        """Should build defaults and read credentials from the environment."""
        config = load_config()

        assert isinstance(config, AppConfig)
        assert config.store.backend == "rest"
        assert config.store.url == "https://project.example.co"
        assert config.store.anon_key == "public-key"
        assert config.dashboard.default_range == "1Y"
        assert config.dashboard.row_limit == 5000
        assert config.advanced.log_level == "INFO"

    def test_missing_credentials_fatal(self, no_store_env):
        """Should refuse to start without a store URL and key."""
        with pytest.raises(ConfigValidationError):
            load_config()

    def test_missing_key_only(self, monkeypatch, no_store_env):
        """Should require the access key as well as the URL."""
        monkeypatch.setenv("SUPABASE_URL", "https://project.example.co")
        with pytest.raises(ConfigValidationError, match="key"):
            load_config()

    def test_yaml_with_env_substitution(self, tmp_path: Path, monkeypatch):
        """Should substitute ${VAR} references in the YAML file."""
        monkeypatch.setenv("VOL_URL", "https://other.example.co")
        monkeypatch.setenv("VOL_KEY", "other-key")
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "store:\n"
            "  url: ${VOL_URL}\n"
            "  anon_key: ${VOL_KEY}\n"
            "  timeout: 3\n"
            "dashboard:\n"
            "  default_range: 5Y\n"
            "  row_limit: 1000\n"
            "  connect_gaps: false\n"
            "advanced:\n"
            "  log_level: DEBUG\n"
        )

        config = load_config(str(config_file))

        assert config.store.url == "https://other.example.co"
        assert config.store.anon_key == "other-key"
        assert config.store.timeout == 3
        assert config.dashboard.default_range == "5Y"
        assert config.dashboard.row_limit == 1000
        assert config.dashboard.connect_gaps is False
        assert config.advanced.log_level == "DEBUG"

    def test_sqlite_backend_needs_no_credentials(self, tmp_path: Path, no_store_env):
        """Should allow the local backend without store credentials."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            f"store:\n  backend: sqlite\n  sqlite_path: {tmp_path / 'v.db'}\n"
        )

        config = load_config(str(config_file))
        assert config.store.backend == "sqlite"

    def test_unknown_backend(self, tmp_path: Path, store_env):
        """Should reject an unknown backend."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("store:\n  backend: redis\n")
        with pytest.raises(ConfigValidationError):
            load_config(str(config_file))

    def test_unknown_default_range(self, tmp_path: Path, store_env):
        """Should reject an unknown default range."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("dashboard:\n  default_range: 2W\n")
        with pytest.raises(ConfigValidationError):
            load_config(str(config_file))

    def test_default_range_case_insensitive(self, tmp_path: Path, store_env):
        """Should accept a lowercase default range and normalise it."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("dashboard:\n  default_range: ' 1m '\n")

        config = load_config(str(config_file))

        assert config.dashboard.default_range == "1M"

    def test_bad_row_limit(self, tmp_path: Path, store_env):
        """Should reject a non-positive row limit."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("dashboard:\n  row_limit: 0\n")
        with pytest.raises(ConfigValidationError):
            load_config(str(config_file))

    def test_missing_file(self, tmp_path: Path):
        """Should raise FileNotFoundError for a missing file."""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "absent.yaml"))
