from __future__ import annotations

import re
from typing import NamedTuple

from src.core.errors import MalformedTimestamp

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class EventRecord(NamedTuple):
    """One event as delivered by an event source.

    `timestamp` is raw: sources may hand over strings or malformed values,
    which are rejected by `parse_timestamp` during grouping.
    """

    key: str | None
    timestamp: object
    is_qualifying: bool


def parse_timestamp(raw: object) -> int:
    """Return `raw` as non-negative epoch seconds or raise MalformedTimestamp."""
    if isinstance(raw, bool):
        raise MalformedTimestamp(raw)
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not raw.is_integer():
            raise MalformedTimestamp(raw)
        value = int(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not _INTEGER_RE.fullmatch(text):
            raise MalformedTimestamp(raw)
        value = int(text)
    else:
        raise MalformedTimestamp(raw)
    if value < 0:
        raise MalformedTimestamp(raw)
    return value
