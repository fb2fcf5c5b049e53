"""Shared utilities and components for all services."""

from .config import BaseBatchConfig, BaseLoggingConfig, BaseServiceConfig

__all__ = [
    "BaseServiceConfig",
    "BaseLoggingConfig",
    "BaseBatchConfig",
]
