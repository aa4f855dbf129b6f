"""Configuration file loading and validation."""

import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from .consts import API_BASE_DEFAULT, LOG_FILE_DEFAULT, TIMEOUT_HTTP_REQUEST
from .errors import ConfigException

logger = logging.getLogger(__name__)

ENV_PREFIX = "POLICYADMIN_"


class ApiConfig(BaseModel):
    """Backend API configuration."""

    base_url: str = Field(default=API_BASE_DEFAULT)
    timeout: int = Field(default=TIMEOUT_HTTP_REQUEST, ge=1)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid API base URL: {v}. Expected http://... or https://...")
        return v.rstrip("/")


class ReferenceConfig(BaseModel):
    """Reference data loading configuration."""

    preload_all: bool = False


class WebConfig(BaseModel):
    """Web UI configuration."""

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=5000, ge=1, le=65535)
    debug: bool = Field(default=False)
    secret_key: str = Field(default="dev")


class Config(BaseSettings):
    """Application configuration."""

    log_file: str = Field(default=LOG_FILE_DEFAULT)

    api: ApiConfig = Field(default_factory=ApiConfig)
    references: ReferenceConfig = Field(default_factory=ReferenceConfig)
    web: WebConfig = Field(default_factory=WebConfig)

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )

    @classmethod
    def load_from_file(cls, config_path: str) -> "Config":
        """Load configuration from specified path."""
        path = Path(config_path)
        if not path.exists():
            raise ConfigException(f"Configuration file not found: {config_path}")

        class _Config(cls):
            model_config = SettingsConfigDict(
                toml_file=str(path),
                env_prefix=ENV_PREFIX,
                env_nested_delimiter="__",
            )

        try:
            return _Config()
        except ValidationError as e:
            raise ConfigException(_format_errors(e)) from e

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load from ``config_path`` when it exists, else from environment and defaults."""
        if config_path and Path(config_path).exists():
            return cls.load_from_file(config_path)

        if config_path:
            logger.info(f"Configuration file {config_path} not found, using environment and defaults")
        try:
            return cls()
        except ValidationError as e:
            raise ConfigException(_format_errors(e)) from e


def _format_errors(e: ValidationError) -> str:
    error_lines = ["Configuration validation failed:"]
    for error in e.errors():
        loc = " -> ".join(str(item) for item in error["loc"])
        error_lines.append(f"  - {loc}: {error['msg']}")
    return "\n".join(error_lines)
