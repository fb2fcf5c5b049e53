"""Sessions service logger shim.

Delegates to the shared logger so modules only import from `src.core`.
"""

from __future__ import annotations

import logging

from shared.logging.logger import get_logger as _shared_get_logger


def get_logger(name: str) -> logging.Logger:
    return _shared_get_logger(f"sessions.{name}")
