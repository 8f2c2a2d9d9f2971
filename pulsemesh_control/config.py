"""
Application Settings

Deployment configuration loaded from environment variables
(prefix PULSEMESH_), an optional .env file, and optionally a YAML file
passed on the command line.

Example .env:
- PULSEMESH_RESTART_SCRIPT=/home/fpp/media/plugins/fpp-PulseMesh/scripts/restart_pulsemesh.sh
- PULSEMESH_API_TOKEN=change-me
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .common.exceptions import ConfigError


DEFAULT_RESTART_SCRIPT = "/home/fpp/media/plugins/fpp-PulseMesh/scripts/restart_pulsemesh.sh"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The restart script path is fixed per deployment. Nothing here is ever
    taken from an HTTP request.
    """
    model_config = SettingsConfigDict(
        env_prefix="PULSEMESH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = "development"
    # Comma-separated list, e.g. http://fpp.local,https://fpp.example.com
    allowed_origins: str = ""

    # Restart command
    restart_script: str = DEFAULT_RESTART_SCRIPT
    use_sudo: bool = True
    restart_timeout_seconds: float = 60.0

    # PulseMesh UI service
    service_port: int = 8089
    probe_timeout_seconds: float = 3.0
    trust_forwarded_headers: bool = True

    # Security - restart endpoint is open when unset
    api_token: Optional[str] = None

    # Settings-group passthrough
    settings_group_key: str = "pulsemesh"
    plugin_id: str = "fpp-PulseMesh"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("restart_script")
    @classmethod
    def _script_must_be_absolute(cls, value: str) -> str:
        if not Path(value).is_absolute():
            raise ValueError(f"restart_script must be an absolute path, got {value!r}")
        return value

    @field_validator("restart_timeout_seconds", "probe_timeout_seconds")
    @classmethod
    def _timeout_must_be_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeouts must be positive")
        return value

    @field_validator("service_port")
    @classmethod
    def _port_in_range(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError(f"service_port out of range: {value}")
        return value

    @property
    def origins(self) -> list[str]:
        """Allowed CORS origins, with local defaults in development."""
        origins = [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]
        if self.environment == "development" or not origins:
            origins.extend([
                "http://localhost",
                "http://127.0.0.1",
            ])
        return origins


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()


def load_settings(config_path: str | None = None) -> Settings:
    """
    Load settings, letting a YAML file override the environment.

    Args:
        config_path: Optional path to a YAML mapping of setting names

    Returns:
        Settings instance

    Raises:
        ConfigError: If the file is missing, unreadable, or not a mapping,
            or if any setting is invalid (e.g. a relative restart_script)
    """
    if config_path is None:
        return _build_settings({}, "environment")

    path = Path(config_path)
    try:
        with open(path, "r") as f:
            data: Any = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigError(f"Configuration file not found: {config_path}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing {config_path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping of settings")

    return _build_settings(data, config_path)


def _build_settings(overrides: dict, source: str) -> Settings:
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {source}: {e}")
