"""Logging setup for the sessions batch job.

Wraps the shared JSON configuration with this service's settings and stamps
the reporting window onto every record of the run.
"""

from __future__ import annotations

import logging

from shared.logging.json import configure_logging as _shared_configure_logging
from src.core.config import Settings, get_settings


def configure_logging(
    run_labels: dict | None = None, config: Settings | None = None
) -> logging.Logger:
    config = config or get_settings()
    return _shared_configure_logging(
        service=config.otel_service_name,
        level=config.app_log_level,
        environment=config.app_environment,
        redaction_patterns=config.app_log_redaction_patterns,
        run_labels=run_labels,
    )
