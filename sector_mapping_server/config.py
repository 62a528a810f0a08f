"""
Configuration for the Sector Mapping Server.

Uses Pydantic for validation and environment variable loading.
Every setting has a clear purpose, sensible default, and validation.

Environment Variables:
    SECTOR_SEARCH_RESULT_LIMIT: Max ATECO search results over HTTP (default: 20)
    SECTOR_WARN_ON_UNSUGGESTED_ATECO: Warn when an ATECO code is not suggested
        for the resolved sector (true/false)
    SECTOR_DEBUG: Enable debug mode (true/false)
    DEBUG: Alternative debug flag

    HTTP API:
    SECTOR_HTTP_HOST: Bind address (default: 0.0.0.0)
    SECTOR_HTTP_PORT: Bind port (default: 8080)
    SECTOR_ENABLE_HTTP: Start the HTTP API alongside the MCP server (true/false)

    Metrics:
    SECTOR_ENABLE_METRICS: Enable Prometheus metrics (true/false)

    Logging:
    SECTOR_LOG_LEVEL: Log level - DEBUG, INFO, WARNING, ERROR (default: INFO)
    SECTOR_LOG_FORMAT: Log format - json or text (default: json)
    SECTOR_LOG_FILE: Log file path (logs to stderr if not set)
    SECTOR_SERVICE_NAME: Service name for log records (default: sector-mapping-server)
    SECTOR_ENVIRONMENT: Environment name (default: development)
"""

import logging
import os
from typing import Any

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_SETTINGS = SettingsConfigDict(
    env_prefix="SECTOR_",
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
)


class LookupConfig(BaseSettings):
    """
    Configuration for ATECO search and sector resolution.

    Environment variables use the SECTOR_ prefix.
    """

    model_config = _SETTINGS

    search_result_limit: int = Field(
        default=20, ge=1, le=100, description="Maximum ATECO search results returned over HTTP"
    )
    warn_on_unsuggested_ateco: bool = Field(
        default=True,
        description="Log a warning when an ATECO code is not suggested for the sector",
    )

    def to_dict(self) -> dict:
        """Convert config to dictionary for logging/debugging."""
        return {
            "search_result_limit": self.search_result_limit,
            "warn_on_unsuggested_ateco": self.warn_on_unsuggested_ateco,
        }


class HTTPConfig(BaseSettings):
    """
    Configuration for the HTTP API.

    Environment variables use the SECTOR_ prefix.
    """

    model_config = _SETTINGS

    enable_http: bool = Field(
        default=False, description="Start the HTTP API alongside the MCP server"
    )
    http_host: str = Field(default="0.0.0.0", min_length=1, description="HTTP bind address")
    http_port: int = Field(default=8080, ge=1, le=65535, description="HTTP bind port")

    def to_dict(self) -> dict:
        """Convert config to dictionary for logging/debugging."""
        return {
            "enable_http": self.enable_http,
            "http_host": self.http_host,
            "http_port": self.http_port,
        }


class MetricsConfig(BaseSettings):
    """
    Configuration for Prometheus metrics.

    Environment variables use the SECTOR_ prefix.
    """

    model_config = _SETTINGS

    enable_metrics: bool = Field(default=True, description="Enable Prometheus metrics collection")
    metrics_path: str = Field(default="/metrics", description="Path for metrics endpoint")

    def to_dict(self) -> dict:
        """Convert config to dictionary for logging/debugging."""
        return {
            "enable_metrics": self.enable_metrics,
            "metrics_path": self.metrics_path,
        }


class LoggingConfig(BaseSettings):
    """
    Configuration for structured logging.

    Environment variables use the SECTOR_ prefix.
    """

    model_config = _SETTINGS

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    log_format: str = Field(
        default="json",
        description="Log format: 'json' for production, 'text' for development",
        pattern=r"^(json|text)$",
    )
    log_file: str | None = Field(
        default=None, description="Log file path (logs to stderr if not set)"
    )
    service_name: str = Field(
        default="sector-mapping-server", description="Service name for log records"
    )
    environment: str = Field(
        default="development", description="Environment name (development, staging, production)"
    )

    def to_dict(self) -> dict:
        """Convert config to dictionary for logging/debugging."""
        return {
            "log_level": self.log_level,
            "log_format": self.log_format,
            "log_file": self.log_file,
            "service_name": self.service_name,
            "environment": self.environment,
        }


class ServerConfig(BaseSettings):
    """
    Configuration for the MCP server itself.

    Environment variables use the SECTOR_ prefix.
    """

    model_config = _SETTINGS

    name: str = Field(
        default="Sector Mapping Assistant", min_length=1, description="Server display name"
    )
    description: str = Field(
        default=(
            "Maps onboarding sectors to weighted Damodaran valuation industries "
            "and searches the Italian ATECO 2-digit classification."
        ),
        description="Server description",
    )
    version: str = Field(
        default="0.1.0", pattern=r"^\d+\.\d+\.\d+", description="Server version (semver)"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    @model_validator(mode="before")
    @classmethod
    def check_debug_env(cls, data: Any) -> Any:
        """Check both SECTOR_DEBUG and DEBUG environment variables."""
        if isinstance(data, dict) and data.get("debug") is None:
            debug_value = os.getenv("DEBUG", os.getenv("SECTOR_DEBUG", "false"))
            data["debug"] = debug_value.lower() in ("true", "1", "yes")
        return data

    def to_dict(self) -> dict:
        """Convert config to dictionary for logging/debugging."""
        return {
            "name": self.name,
            "version": self.version,
            "debug": self.debug,
        }


class AppConfig(BaseModel):
    """
    Combined application configuration.

    Provides a single entry point for all configuration with validation.
    """

    lookup: LookupConfig = Field(default_factory=LookupConfig)
    http: HTTPConfig = Field(default_factory=HTTPConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def validate_startup(self) -> list[str]:
        """
        Validate configuration for startup.

        Builds the reference tables so inconsistent data fails fast.

        Returns list of warnings (empty if all OK).
        Raises ReferenceDataError for inconsistent reference data.
        """
        from .core.reference_data import get_reference_tables

        warnings = []

        get_reference_tables()

        if self.server.debug:
            warnings.append("Debug mode is enabled - not recommended for production")

        if not self.lookup.warn_on_unsuggested_ateco:
            warnings.append("Warnings for unsuggested ATECO codes are disabled")

        if not self.metrics.enable_metrics:
            warnings.append("Metrics collection is disabled")

        return warnings

    def to_dict(self) -> dict:
        """Convert full config to dictionary."""
        return {
            "lookup": self.lookup.to_dict(),
            "http": self.http.to_dict(),
            "server": self.server.to_dict(),
            "metrics": self.metrics.to_dict(),
            "logging": self.logging.to_dict(),
        }


# Singleton instance management
_config_instance: AppConfig | None = None


def get_config() -> AppConfig:
    """
    Get the application configuration singleton.

    Creates and validates config on first call.
    Subsequent calls return the cached instance.

    Raises:
        ReferenceDataError: If the reference tables are inconsistent
    """
    global _config_instance

    if _config_instance is None:
        _config_instance = AppConfig()
        for warning in _config_instance.validate_startup():
            logger.warning(f"Configuration warning: {warning}")

    return _config_instance


def reset_config() -> None:
    """Reset the configuration singleton (for tests or reloads)."""
    global _config_instance
    _config_instance = None


def get_lookup_config() -> LookupConfig:
    """Get lookup configuration (convenience function)."""
    return get_config().lookup


def get_http_config() -> HTTPConfig:
    """Get HTTP configuration (convenience function)."""
    return get_config().http


def get_server_config() -> ServerConfig:
    """Get server configuration (convenience function)."""
    return get_config().server


def get_metrics_config() -> MetricsConfig:
    """Get metrics configuration (convenience function)."""
    return get_config().metrics


def get_logging_config() -> LoggingConfig:
    """Get logging configuration (convenience function)."""
    return get_config().logging
