"""Prometheus metrics for the sessions batch job."""

from shared.metrics import get_counter, get_histogram

SERVICE = "sessions"

RECORDS_ACCEPTED = get_counter(
    "records_accepted_total", "Qualifying events used for sessionization", SERVICE
)
RECORDS_DROPPED = get_counter(
    "records_dropped_total",
    "Events dropped before sessionization",
    SERVICE,
    labelnames=("reason",),
)
SESSIONS_BUILT = get_counter(
    "windows_built_total", "Session windows reconstructed", SERVICE
)
REPORT_ROWS_WRITTEN = get_counter(
    "report_rows_written_total", "Report rows written for the run", SERVICE
)
METRICS_NOT_AVAILABLE = get_counter(
    "metrics_not_available_total",
    "Metrics skipped because they had no observations",
    SERVICE,
)
RUN_FAILURES = get_counter("run_failures_total", "Runs aborted by an error", SERVICE)

RUN_DURATION = get_histogram(
    "run_duration_seconds",
    "Wall time of a full run",
    SERVICE,
    buckets=[1, 5, 15, 60, 300, 900, 1800, 3600, 7200],
)
