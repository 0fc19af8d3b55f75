"""Configuration management for the Youdu app SDK.

This module provides configuration models and loading functionality using Pydantic
for validation and type safety.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..crypto.envelope import decode_aes_key
from ..errors import ConfigError

DEFAULT_CALLBACK_PATH = "/receive/youdu/msg"

_DOTENV_LOADED = False


def _load_env_once() -> None:
    """Load environment variables from a .env file exactly once."""

    global _DOTENV_LOADED
    if not _DOTENV_LOADED:
        load_dotenv()
        _DOTENV_LOADED = True


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand environment variables in configuration data."""

    if isinstance(data, str):
        return os.path.expandvars(data)
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    return data


class AppCredential(BaseModel):
    """Tenant and application identity plus the shared AES key.

    The key is given base64 encoded, as shown in the Youdu admin console, and
    must decode to exactly 32 bytes. A bad key raises ``ConfigError`` at
    construction time, before any request is made.
    """

    model_config = ConfigDict(frozen=True)

    buin: int = Field(..., description="Enterprise (tenant) number")
    app_id: str = Field(..., min_length=1, description="Application ID")
    aes_key: str = Field(..., repr=False, description="Base64 encoded 256-bit AES key")

    @field_validator("aes_key")
    @classmethod
    def validate_aes_key(cls, value: str) -> str:
        decode_aes_key(value)
        return value

    @property
    def key(self) -> bytes:
        """Raw 32-byte AES key."""
        return decode_aes_key(self.aes_key)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    log_file: str | None = Field(default=None, description="Log file path")
    max_bytes: int = Field(default=10485760, description="Max log file size (10MB)")
    backup_count: int = Field(default=5, description="Number of backup files")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level


class CallbackConfig(BaseModel):
    """Configuration for the inbound callback server."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8899, description="Bind port")
    path: str = Field(default=DEFAULT_CALLBACK_PATH, description="Callback URI")
    workers: int = Field(default=4, ge=1, description="Handler worker threads")
    queue_size: int = Field(
        default=1000, ge=1, description="Maximum callbacks waiting for a worker"
    )

    @field_validator("path")
    @classmethod
    def validate_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("Callback path must start with '/'")
        return value


class YouduConfig(BaseSettings):
    """Main configuration for a Youdu application client."""

    model_config = SettingsConfigDict(
        env_prefix="YOUDU_APP_",
        env_nested_delimiter="__",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    buin: int = Field(..., description="Enterprise (tenant) number")
    app_id: str = Field(..., description="Application ID")
    aes_key: str = Field(..., repr=False, description="Base64 encoded AES key")
    server_addr: str = Field(
        default="http://localhost:7080",
        description="Youdu server address including scheme",
    )
    timeout: float | None = Field(
        default=None,
        ge=0.0,
        description="HTTP timeout in seconds (None disables timeouts)",
    )
    callback: CallbackConfig = Field(default_factory=CallbackConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("server_addr")
    @classmethod
    def validate_server_addr(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Server address cannot be empty")
        if not value.startswith("http"):
            raise ValueError("Server address must start with http:// or https://")
        return value.strip().rstrip("/")

    def credential(self) -> AppCredential:
        """Build the validated credential for this application."""
        return AppCredential(buin=self.buin, app_id=self.app_id, aes_key=self.aes_key)

    @classmethod
    def from_yaml(cls, path: str | Path) -> YouduConfig:
        """Load configuration from a YAML file."""

        _load_env_once()
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        with open(config_path, encoding="utf-8") as handle:
            try:
                config_data = yaml.safe_load(handle)
            except yaml.YAMLError as exc:
                raise ConfigError(f"Invalid YAML in config file: {exc}") from exc

        if not config_data:
            config_data = {}

        config_data = _expand_env_vars(config_data)
        return cls(**config_data)

    @classmethod
    def from_json(cls, path: str | Path) -> YouduConfig:
        """Load configuration from a JSON file."""

        _load_env_once()
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        try:
            config_data = json.loads(config_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file: {exc}") from exc

        config_data = _expand_env_vars(config_data or {})
        return cls(**config_data)

    @classmethod
    def load(cls, path: str | Path) -> YouduConfig:
        """Load configuration, choosing the parser from the file extension."""

        if Path(path).suffix.lower() == ".json":
            return cls.from_json(path)
        return cls.from_yaml(path)
