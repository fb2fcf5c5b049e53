"""Event sources: where (key, timestamp, is_qualifying) records come from.

A source returns the input partitions for a reporting window. Partitions
are re-iterable so a failed partition can be read again.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Iterable, Iterator

from src.core.logger import get_logger
from src.core.schemas.event_source import EventRecord
from src.core.schemas.report import ReportWindow

logger = get_logger("event_source")

_TRUE_VALUES = frozenset({"true", "t", "1", "yes"})


class EventSource(ABC):
    @abstractmethod
    def partitions(self, window: ReportWindow) -> list[Iterable[EventRecord]]:
        """Return the input partitions holding the window's events."""


class InMemoryEventSource(EventSource):
    """Serves prepared partitions regardless of the window."""

    def __init__(self, partitions: Iterable[Iterable[tuple]]):
        self._partitions = [
            [EventRecord(*record) for record in partition] for partition in partitions
        ]

    def partitions(self, window: ReportWindow) -> list[list[EventRecord]]:
        return [list(partition) for partition in self._partitions]


def parse_line(line: str) -> EventRecord:
    """Parse `key<TAB>timestamp<TAB>is_qualifying`; missing fields disqualify."""
    fields = line.rstrip("\r\n").split("\t")
    key = fields[0] or None
    timestamp = fields[1] if len(fields) > 1 else None
    is_qualifying = len(fields) > 2 and fields[2].strip().lower() in _TRUE_VALUES
    return EventRecord(key, timestamp, is_qualifying)


class TsvFilePartition:
    """One input file; every iteration re-reads it from the start."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def __iter__(self) -> Iterator[EventRecord]:
        with self.path.open("r", encoding="utf-8") as handle:
            for line in handle:
                if line.strip():
                    yield parse_line(line)

    def __repr__(self) -> str:
        return f"TsvFilePartition({str(self.path)!r})"


class TsvEventSource(EventSource):
    """Reads day-partitioned TSV files.

    Layout: ``<base>/year=2015/month=3/day=30/*.tsv``; one partition per file.
    """

    def __init__(self, base_path: str | Path, pattern: str = "*.tsv"):
        self.base_path = Path(base_path)
        self.pattern = pattern

    def day_path(self, day: date) -> Path:
        return self.base_path / f"year={day.year}" / f"month={day.month}" / f"day={day.day}"

    def partitions(self, window: ReportWindow) -> list[TsvFilePartition]:
        partitions: list[TsvFilePartition] = []
        for day in window.days():
            path = self.day_path(day)
            if not path.is_dir():
                logger.warning("day_partition_missing", extra={"path": str(path)})
                continue
            partitions.extend(TsvFilePartition(p) for p in sorted(path.glob(self.pattern)))
        logger.info(
            "input_partitions_listed",
            extra={
                "base_path": str(self.base_path),
                "days": window.period_days,
                "partitions": len(partitions),
            },
        )
        return partitions
