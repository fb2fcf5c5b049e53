"""Cumulative session metrics report persisted as a TSV file.

Each run reads the whole report, drops the rows of its own reporting
period, appends its new rows and rewrites the file. The rewrite goes to a
temporary file in the same directory which is then renamed over the
report, so a failed run leaves the previous report intact.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence

from src.core.errors import StorageReadError, StorageWriteError
from src.core.logger import get_logger
from src.core.schemas.report import (
    DEFAULT_QUANTILES,
    FIELD_SEPARATOR,
    FIXED_FIELDS,
    LABEL_FIELD_INDEX,
    DatedReportRow,
)

logger = get_logger("report_store")


def label_of(line: str) -> str:
    return line.split(FIELD_SEPARATOR)[LABEL_FIELD_INDEX]


class PersistedReport:
    """Report lines in file order, without line terminators."""

    def __init__(self, lines: Iterable[str] = ()):
        self.lines = tuple(lines)

    @classmethod
    def from_rows(cls, rows: Iterable[DatedReportRow]) -> "PersistedReport":
        return cls(row.to_line() for row in rows)

    @classmethod
    def from_text(
        cls, text: str, quantiles: Sequence[float] = DEFAULT_QUANTILES
    ) -> "PersistedReport":
        """Parse report text; raises ValueError on a malformed line."""
        expected = FIXED_FIELDS + len(quantiles)
        lines = []
        for number, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            fields = line.split(FIELD_SEPARATOR)
            if len(fields) != expected:
                raise ValueError(
                    f"line {number}: expected {expected} fields, got {len(fields)}"
                )
            lines.append(line)
        return cls(lines)

    def rows(self, quantiles: Sequence[float] = DEFAULT_QUANTILES) -> list[DatedReportRow]:
        return [DatedReportRow.from_line(line, quantiles) for line in self.lines]

    def to_text(self) -> str:
        return "".join(line + "\n" for line in self.lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PersistedReport):
            return NotImplemented
        return self.lines == other.lines

    def __repr__(self) -> str:
        return f"PersistedReport({len(self.lines)} rows)"


class ReportStore:
    def __init__(self, path: str | Path, quantiles: Sequence[float] = DEFAULT_QUANTILES):
        self.path = Path(path)
        self.quantiles = tuple(quantiles)

    def load(self) -> Optional[PersistedReport]:
        """Read the persisted report; None when none was written yet."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageReadError(f"cannot read report {self.path}: {exc}") from exc
        try:
            return PersistedReport.from_text(text, self.quantiles)
        except ValueError as exc:
            raise StorageReadError(f"corrupt report {self.path}: {exc}") from exc

    @staticmethod
    def merge(
        existing: Optional[PersistedReport],
        new_rows: Sequence[DatedReportRow],
        date_range_label: str,
    ) -> PersistedReport:
        """Replace the rows of `date_range_label` with `new_rows`.

        Rows of every other period are kept unmodified and in order; the
        new rows follow them.
        """
        metric_names = [row.metric_name for row in new_rows]
        if len(set(metric_names)) != len(metric_names):
            raise ValueError(f"duplicate metrics in new rows: {metric_names}")
        for row in new_rows:
            if row.date_range_label != date_range_label:
                raise ValueError(
                    f"row for {row.date_range_label!r} in a run for {date_range_label!r}"
                )
        kept: list[str] = []
        if existing is not None:
            kept = [line for line in existing if label_of(line) != date_range_label]
        return PersistedReport(kept + [row.to_line() for row in new_rows])

    def save(self, report: PersistedReport) -> None:
        """Atomically replace the report file with `report`."""
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=directory
            )
        except OSError as exc:
            raise StorageWriteError(f"cannot write report {self.path}: {exc}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                handle.write(report.to_text())
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise StorageWriteError(f"cannot write report {self.path}: {exc}") from exc

    def commit(
        self, new_rows: Sequence[DatedReportRow], date_range_label: str
    ) -> PersistedReport:
        existing = self.load()
        merged = self.merge(existing, new_rows, date_range_label)
        self.save(merged)
        replaced = 0
        if existing is not None:
            replaced = len(existing) - (len(merged) - len(new_rows))
        logger.info(
            "report_committed",
            extra={
                "path": str(self.path),
                "label": date_range_label,
                "rows_total": len(merged),
                "rows_written": len(new_rows),
                "rows_replaced": replaced,
            },
        )
        return merged
