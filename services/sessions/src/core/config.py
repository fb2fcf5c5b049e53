from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from shared.config import BaseServiceConfig


class Settings(BaseServiceConfig):
    # Sessionization
    processing_session_gap_seconds: int = Field(default=1800, gt=0)

    # Statistics
    sessions_quantiles: list[float] = [0.1, 0.5, 0.9, 0.99]
    sessions_sketch_level: int = Field(default=8, ge=1, le=62)

    # Reporting window (year/month/day are required to run the job)
    report_year: int | None = None
    report_month: int | None = Field(default=None, ge=1, le=12)
    report_day: int | None = Field(default=None, ge=1, le=31)
    report_period_days: int = Field(default=30, ge=1, le=31)

    # Input
    sessions_input_base_path: str = "/wmf/data/webrequest"
    sessions_num_partitions: int = Field(default=16, ge=1)

    # Execution
    sessions_executor: Literal["serial", "threads", "processes"] = "threads"
    sessions_max_workers: int = Field(default=4, ge=1)
    sessions_partition_retries: int = Field(default=3, ge=1)

    # Output
    report_output_dir: str = "/wmf/data/mobile-sessions"
    report_file_name: str = "session_metrics.tsv"

    otel_service_name: str = "sessions"

    @field_validator("sessions_quantiles")
    @classmethod
    def _quantiles_in_unit_interval(cls, value: list[float]) -> list[float]:
        if not value:
            raise ValueError("at least one quantile level is required")
        for q in value:
            if not 0.0 <= q <= 1.0:
                raise ValueError(f"quantile level {q} is outside [0, 1]")
        # One report column per level.
        if len(set(value)) != len(value):
            raise ValueError(f"duplicate quantile levels: {value}")
        return sorted(value)


@lru_cache
def get_settings() -> Settings:
    """Settings from the environment, read on first use."""
    return Settings()
