"""
Configuration management for the session store.

This module provides centralized configuration loading and validation using
Pydantic settings. Connection details and store options are loaded from
environment variables or .env files.

Environment-specific files (.env.development, .env.staging, .env.production)
are selected through the ENVIRONMENT variable and override the base .env file.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Optional, List, Tuple

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from errors.codes import ErrorCode
from errors.exceptions import AppException


# URL schemes accepted by redis-py's from_url (valkey schemes are aliases)
REDIS_URL_SCHEMES = ("redis://", "rediss://", "unix://", "valkey://", "valkeys://")


class Environment(str, Enum):
    """Supported deployment environments."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


def _detect_environment() -> Environment:
    """
    Detect the current environment from the ENVIRONMENT variable.

    Returns:
        Environment: The detected environment, defaults to DEVELOPMENT if not set.
    """
    env_value = os.environ.get("ENVIRONMENT", "development").lower().strip()
    try:
        return Environment(env_value)
    except ValueError:
        # If invalid value, default to development
        return Environment.DEVELOPMENT


def _get_env_files(environment: Environment) -> Tuple[str, ...]:
    """
    Get the list of .env files to load for the given environment.

    Files are loaded in order, with later files overriding earlier ones.

    Args:
        environment: The target environment.

    Returns:
        Tuple of .env file paths to load.
    """
    env_file_map = {
        Environment.DEVELOPMENT: ".env.development",
        Environment.STAGING: ".env.staging",
        Environment.PRODUCTION: ".env.production",
    }

    env_specific_file = env_file_map.get(environment, ".env.development")

    return (".env", env_specific_file)


class Settings(BaseSettings):
    """
    Session store settings loaded from environment variables.

    Only the Redis URL is required, and only outside development; every
    store option has a default matching the store's own defaults.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Deployment environment (development, staging, production)"
    )

    # Backend connection
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis/Valkey connection URL for session storage"
    )
    redis_cluster: bool = Field(
        default=False,
        description="Connect with the cluster client instead of the standalone client"
    )

    # Store options
    session_prefix: str = Field(
        default="sess:",
        description="Key prefix under which sessions are stored"
    )
    session_scan_count: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="COUNT hint passed to each SCAN round trip"
    )
    session_ttl_seconds: int = Field(
        default=86400,
        ge=1,
        description="Session time-to-live in seconds when the cookie carries no expiration"
    )
    session_disable_ttl: bool = Field(
        default=False,
        description="Store sessions without expiration"
    )
    session_disable_touch: bool = Field(
        default=False,
        description="Skip expiration refresh on touch"
    )

    # Observability Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate that redis_url uses a scheme the Redis client understands."""
        if v is None:
            return v
        v = v.strip()
        if not v:
            return None
        if not v.startswith(REDIS_URL_SCHEMES):
            raise ValueError(
                f"redis_url must start with one of: {', '.join(REDIS_URL_SCHEMES)}"
            )
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log_level is a valid logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.strip().upper()
        if v not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(sorted(valid_levels))}")
        return v

    @model_validator(mode="after")
    def validate_redis_config(self) -> "Settings":
        """Validate that a Redis URL is provided outside development."""
        if not self.redis_url and self.environment != Environment.DEVELOPMENT:
            raise ValueError(
                "redis_url is required in non-development environments"
            )
        return self


class ConfigurationError(AppException):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None,
                 invalid_fields: Optional[dict] = None):
        self.missing_fields = missing_fields or []
        self.invalid_fields = invalid_fields or {}
        details = {}
        if self.missing_fields:
            details["missing_fields"] = self.missing_fields
        if self.invalid_fields:
            details["invalid_fields"] = self.invalid_fields
        super().__init__(ErrorCode.CONFIGURATION_ERROR, message, details or None)
        self.args = (self.format_error_message(),)

    def format_error_message(self) -> str:
        """Format a descriptive error message listing all issues."""
        parts = [self.message]

        if self.missing_fields:
            parts.append(f"\nMissing required fields: {', '.join(self.missing_fields)}")

        if self.invalid_fields:
            invalid_parts = [f"  - {field}: {error}" for field, error in self.invalid_fields.items()]
            parts.append("\nInvalid field values:\n" + "\n".join(invalid_parts))

        return "".join(parts)


def create_settings_for_environment(environment: Optional[Environment] = None) -> Settings:
    """
    Factory function to create Settings for a specific environment.

    This function detects the environment from the ENVIRONMENT variable (if not provided)
    and loads the appropriate environment-specific .env file.

    Args:
        environment: Optional environment override. If not provided, detected from
                    ENVIRONMENT variable.

    Returns:
        Settings: Validated settings for the specified environment.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    if environment is None:
        environment = _detect_environment()

    env_files = _get_env_files(environment)

    existing_env_files = [env_file for env_file in env_files if Path(env_file).exists()]

    # pydantic ignores env files that do not exist
    if not existing_env_files:
        existing_env_files = list(env_files)

    try:
        class EnvironmentSettings(Settings):
            model_config = SettingsConfigDict(
                env_file=tuple(existing_env_files),
                env_file_encoding="utf-8",
                case_sensitive=False,
                extra="ignore"
            )

        return EnvironmentSettings()
    except Exception as e:
        missing_fields = []
        invalid_fields = {}

        if hasattr(e, 'errors'):
            for error in e.errors():
                field_name = '.'.join(str(loc) for loc in error.get('loc', []))
                error_type = error.get('type', '')
                error_msg = error.get('msg', str(error))

                if error_type == 'missing':
                    missing_fields.append(field_name)
                else:
                    invalid_fields[field_name or "settings"] = error_msg

        raise ConfigurationError(
            f"Failed to load configuration for environment '{environment.value}'",
            missing_fields=missing_fields,
            invalid_fields=invalid_fields
        ) from e


# Global settings cache
_settings_cache: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Settings are loaded once and cached for subsequent calls.

    Returns:
        Settings: The validated application settings.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    global _settings_cache

    if _settings_cache is None:
        _settings_cache = create_settings_for_environment()

    return _settings_cache


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    This is primarily useful for testing to allow reloading settings
    with different environment variables.
    """
    global _settings_cache
    _settings_cache = None


def validate_startup() -> None:
    """
    Validate all required settings at application startup.

    Raises:
        ConfigurationError: If any required settings are missing or invalid.
    """
    settings = get_settings()

    validation_errors = {}

    # Sessions stored without expiration are never reclaimed by the backend
    if settings.environment == Environment.PRODUCTION and settings.session_disable_ttl:
        validation_errors["session_disable_ttl"] = (
            "Sessions must expire in production. Unset SESSION_DISABLE_TTL."
        )

    if settings.redis_cluster and settings.redis_url and settings.redis_url.startswith("unix://"):
        validation_errors["redis_cluster"] = (
            "Cluster connections cannot use a unix socket URL"
        )

    if validation_errors:
        raise ConfigurationError(
            "Configuration validation failed during startup",
            invalid_fields=validation_errors
        )


def get_environment_info() -> dict:
    """
    Get information about the current environment configuration.

    Returns:
        dict: Information about the detected environment and loaded config files.
    """
    environment = _detect_environment()
    env_files = _get_env_files(environment)

    existing_files = [f for f in env_files if Path(f).exists()]

    return {
        "environment": environment.value,
        "env_files_checked": list(env_files),
        "env_files_loaded": existing_files,
    }
