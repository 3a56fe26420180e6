"""
Configuration loading and validation.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from voldash.data.timerange import TimeRange

URL_ENV_VAR = "SUPABASE_URL"
KEY_ENV_VAR = "SUPABASE_ANON_KEY"

BACKENDS = ("rest", "sqlite")


class ConfigValidationError(Exception):
    """Raised when configuration is invalid."""

    pass


@dataclass
class StoreConfig:
    """Backing store configuration."""

    backend: str = "rest"
    url: str = ""
    anon_key: str = ""
    timeout: float = 10.0
    sqlite_path: str = "data/voldash.db"


@dataclass
class DashboardConfig:
    """Chart read-path configuration."""

    default_range: str = "1Y"
    row_limit: int = 5000
    connect_gaps: bool = True


@dataclass
class AdvancedConfig:
    """Advanced configuration."""

    log_level: str = "INFO"


@dataclass
class AppConfig:
    """Main application configuration."""

    store: StoreConfig = field(default_factory=StoreConfig)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)
    advanced: AdvancedConfig = field(default_factory=AdvancedConfig)


def _substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in string values."""
    if isinstance(value, str):
        # Match ${VAR_NAME} pattern
        pattern = r"\$\{([^}]+)\}"
        matches = re.findall(pattern, value)
        for var_name in matches:
            env_value = os.environ.get(var_name, "")
            value = value.replace(f"${{{var_name}}}", env_value)
        return value
    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]
    return value


def _validate_config(config_dict: dict[str, Any]) -> None:
    """Validate configuration values."""
    store = config_dict.get("store") or {}
    backend = store.get("backend", "rest")
    if backend not in BACKENDS:
        raise ConfigValidationError(f"Unknown store backend: {backend}")

    if backend == "rest":
        if not store.get("url"):
            raise ConfigValidationError(
                f"Store URL is required (set {URL_ENV_VAR})"
            )
        if not store.get("anon_key"):
            raise ConfigValidationError(
                f"Store access key is required (set {KEY_ENV_VAR})"
            )
    elif not store.get("sqlite_path"):
        raise ConfigValidationError("SQLite path is required")

    dashboard = config_dict.get("dashboard") or {}
    default_range = str(dashboard.get("default_range", "1Y")).strip().upper()
    if default_range not in {r.value for r in TimeRange}:
        raise ConfigValidationError(f"Unknown default range: {default_range}")
    if "default_range" in dashboard:
        dashboard["default_range"] = default_range

    row_limit = dashboard.get("row_limit", 5000)
    if not isinstance(row_limit, int) or row_limit <= 0:
        raise ConfigValidationError("Row limit must be a positive integer")


def _apply_env_defaults(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Fill store credentials from the environment when not configured."""
    store = dict(config_dict.get("store") or {})
    store["url"] = store.get("url") or os.environ.get(URL_ENV_VAR, "")
    store["anon_key"] = store.get("anon_key") or os.environ.get(KEY_ENV_VAR, "")
    return {**config_dict, "store": store}


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load configuration from a YAML file and the environment.

    Args:
        config_path: Path to configuration file. When None, defaults are
            used and the store URL and key come from the environment.

    Returns:
        AppConfig instance

    Raises:
        ConfigValidationError: If configuration is invalid
        FileNotFoundError: If config file doesn't exist
    """
    raw_config: dict[str, Any] = {}
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(path) as f:
            raw_config = yaml.safe_load(f) or {}

    # Substitute environment variables
    config_dict = _apply_env_defaults(_substitute_env_vars(raw_config))

    # Validate
    _validate_config(config_dict)

    store = StoreConfig(**config_dict["store"])
    dashboard = DashboardConfig(**(config_dict.get("dashboard") or {}))
    advanced = AdvancedConfig(**(config_dict.get("advanced") or {}))

    return AppConfig(store=store, dashboard=dashboard, advanced=advanced)
