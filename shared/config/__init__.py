"""Shared configuration base classes.

Provides the configuration patterns common to every job of the pipeline so
services only declare their own settings.
"""

from pydantic_settings import BaseSettings


class BaseLoggingConfig(BaseSettings):
    """Common logging configuration for all services."""

    app_log_level: str = "INFO"
    # Domain fields such as "session_count" must stay visible in logs, so
    # the redaction list does not include "session" or "key".
    app_log_redaction_patterns: list[str] = [
        "password",
        "token",
        "secret",
        "authorization",
        "cookie",
    ]
    app_environment: str = "production"


class BaseBatchConfig(BaseSettings):
    """Common settings for batch jobs running over partitioned input."""

    metrics_textfile_path: str | None = None


class BaseServiceConfig(BaseLoggingConfig, BaseBatchConfig):
    """Base configuration combining logging and batch settings.

    Services should inherit from this and add their own specific settings.
    The otel_service_name should be overridden by each service.
    """

    otel_service_name: str = "unknown"  # Should be overridden by service


__all__ = ["BaseLoggingConfig", "BaseBatchConfig", "BaseServiceConfig"]
