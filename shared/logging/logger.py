"""Shared logger utility for all services.

`get_logger` hands out standard library loggers and installs a minimal
plain-text configuration the first time it is used, unless the JSON
configuration from `shared.logging.json` was already applied.
"""

from __future__ import annotations

import logging

_configured = False

_MINIMAL_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str, auto_configure: bool = True) -> logging.Logger:
    """Get a logger, configuring minimal output on first use.

    Args:
        name: Logger name (usually the component name)
        auto_configure: Whether to auto-configure logging on first use

    Returns:
        Logger instance
    """
    global _configured

    if auto_configure and not _configured:
        logging.basicConfig(level=logging.INFO, format=_MINIMAL_FORMAT)
        _configured = True

    logger = logging.getLogger(name)
    logger.propagate = True
    return logger


def is_configured() -> bool:
    return _configured


def mark_configured():
    """Called by shared.logging.json.configure_logging."""
    global _configured
    _configured = True


def reset_configured():
    """Forget previous configuration (test helper)."""
    global _configured
    _configured = False
