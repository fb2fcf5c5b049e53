"""Error kinds of the session metrics job.

Record-level errors (MalformedTimestamp) are recovered by dropping the
record. EmptyMetricError marks a metric as not available for the run.
Storage errors are fatal and must surface before the report is rewritten.
"""

from __future__ import annotations


class SessionMetricsError(Exception):
    """Base class for all errors raised by the job."""


class EmptyMetricError(SessionMetricsError):
    def __init__(self, metric_name: str):
        super().__init__(f"no observations for metric {metric_name!r}")
        self.metric_name = metric_name


class MalformedTimestamp(SessionMetricsError, ValueError):
    def __init__(self, raw: object):
        super().__init__(f"malformed timestamp: {raw!r}")
        self.raw = raw


class StorageReadError(SessionMetricsError):
    pass


class StorageWriteError(SessionMetricsError):
    pass


class PartitionFailure(SessionMetricsError):
    def __init__(self, partition_index: int, attempts: int):
        super().__init__(
            f"partition {partition_index} failed after {attempts} attempt(s)"
        )
        self.partition_index = partition_index
        self.attempts = attempts
