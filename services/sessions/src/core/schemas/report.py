"""Report records produced by a run and persisted in the cumulative report.

Rows are serialized as tab separated lines:

    2015  6  2  2015-6-2 -- 2015-7-1  SessionsPerUser  1259304  1  15  (1.0,2.0)  ...

i.e. year, month, day, date range label, metric name, count, min, max and
one `(low,high)` pair per quantile level in ascending order.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_QUANTILES: tuple[float, ...] = (0.1, 0.5, 0.9, 0.99)
FIELD_SEPARATOR = "\t"
LABEL_SEPARATOR = " -- "
LABEL_FIELD_INDEX = 3
FIXED_FIELDS = 8


def _format_date(d: date) -> str:
    return f"{d.year}-{d.month}-{d.day}"


def _parse_date(text: str) -> date:
    year, month, day = (int(part) for part in text.split("-"))
    return date(year, month, day)


def format_bounds(bounds: tuple[float, float]) -> str:
    low, high = bounds
    return f"({float(low)!r},{float(high)!r})"


def parse_bounds(text: str) -> tuple[float, float]:
    if not (text.startswith("(") and text.endswith(")")):
        raise ValueError(f"malformed quantile bounds: {text!r}")
    low, high = text[1:-1].split(",")
    return float(low), float(high)


class MetricReport(BaseModel):
    """Statistics of one metric: exact count/min/max, approximate quantiles."""

    model_config = ConfigDict(frozen=True)

    count: int = Field(ge=1)
    min: int
    max: int
    quantile_bounds: dict[float, tuple[float, float]]

    @model_validator(mode="after")
    def _check_range(self) -> "MetricReport":
        if self.min > self.max:
            raise ValueError("min must not exceed max")
        return self

    def bounds_for(self, q: float) -> tuple[float, float]:
        return self.quantile_bounds[q]


class ReportWindow(BaseModel):
    """Reporting period: `period_days` days starting at year-month-day."""

    model_config = ConfigDict(frozen=True)

    year: int = Field(ge=1)
    month: int = Field(ge=1, le=12)
    day: int = Field(ge=1, le=31)
    period_days: int = Field(default=30, ge=1, le=31)

    @model_validator(mode="after")
    def _check_calendar_date(self) -> "ReportWindow":
        date(self.year, self.month, self.day)  # raises ValueError on e.g. Feb 30
        return self

    @property
    def start_date(self) -> date:
        return date(self.year, self.month, self.day)

    @property
    def end_date(self) -> date:
        return self.start_date + timedelta(days=self.period_days - 1)

    def days(self) -> list[date]:
        return [self.start_date + timedelta(days=i) for i in range(self.period_days)]

    @property
    def date_range_label(self) -> str:
        return _format_date(self.start_date) + LABEL_SEPARATOR + _format_date(
            self.end_date
        )

    @staticmethod
    def period_days_from_label(label: str) -> int:
        start, end = label.split(LABEL_SEPARATOR)
        return (_parse_date(end) - _parse_date(start)).days + 1


class DatedReportRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int
    month: int
    day: int
    period_days: int
    date_range_label: str
    metric_name: str
    report: MetricReport

    @classmethod
    def for_window(
        cls, window: ReportWindow, metric_name: str, report: MetricReport
    ) -> "DatedReportRow":
        return cls(
            year=window.year,
            month=window.month,
            day=window.day,
            period_days=window.period_days,
            date_range_label=window.date_range_label,
            metric_name=metric_name,
            report=report,
        )

    def to_line(self) -> str:
        report = self.report
        fields = [
            str(self.year),
            str(self.month),
            str(self.day),
            self.date_range_label,
            self.metric_name,
            str(report.count),
            str(report.min),
            str(report.max),
        ]
        fields.extend(
            format_bounds(report.quantile_bounds[q])
            for q in sorted(report.quantile_bounds)
        )
        return FIELD_SEPARATOR.join(fields)

    @classmethod
    def from_line(
        cls, line: str, quantiles: Sequence[float] = DEFAULT_QUANTILES
    ) -> "DatedReportRow":
        fields = line.rstrip("\n").split(FIELD_SEPARATOR)
        levels = sorted(quantiles)
        if len(fields) != FIXED_FIELDS + len(levels):
            raise ValueError(
                f"expected {FIXED_FIELDS + len(levels)} fields, got {len(fields)}"
            )
        label = fields[LABEL_FIELD_INDEX]
        report = MetricReport(
            count=int(fields[5]),
            min=int(fields[6]),
            max=int(fields[7]),
            quantile_bounds={
                q: parse_bounds(text) for q, text in zip(levels, fields[FIXED_FIELDS:])
            },
        )
        return cls(
            year=int(fields[0]),
            month=int(fields[1]),
            day=int(fields[2]),
            period_days=ReportWindow.period_days_from_label(label),
            date_range_label=label,
            metric_name=fields[4],
            report=report,
        )
