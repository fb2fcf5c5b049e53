import time
from pathlib import Path
from typing import Optional

from src.connectors.event_source import EventSource, TsvEventSource
from src.connectors.report_store import ReportStore
from src.core.config import Settings, get_settings
from src.core.executor import PartitionExecutor, build_executor
from src.core.logger import get_logger
from src.core.metrics import (
    METRICS_NOT_AVAILABLE,
    RECORDS_ACCEPTED,
    RECORDS_DROPPED,
    REPORT_ROWS_WRITTEN,
    RUN_DURATION,
    SESSIONS_BUILT,
)
from src.core.pipeline import SessionMetricsPipeline
from src.core.schemas.report import DatedReportRow, ReportWindow
from src.jobs.metric_aggregator import MetricAggregator
from src.transformations.grouping import PartitionGrouper
from src.transformations.sessionizer import Sessionizer

logger = get_logger("job_coordinator")


class JobCoordinator:
    """Runs one reporting window end to end.

    events -> grouping -> sessions -> metric jobs -> report rows -> report.
    Nothing is written unless every stage before the report commit
    succeeded.
    """

    def __init__(
        self,
        source: EventSource,
        store: ReportStore,
        executor: PartitionExecutor,
        num_partitions: int = 16,
        gap_seconds: int = 1800,
        quantiles=(0.1, 0.5, 0.9, 0.99),
        sketch_level: int = 8,
    ):
        self.source = source
        self.store = store
        self.grouper = PartitionGrouper(executor, num_partitions)
        self.sessionizer = Sessionizer(executor, gap_seconds)
        self.pipeline = SessionMetricsPipeline.with_default_jobs(
            MetricAggregator(executor, quantiles, sketch_level)
        )

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "JobCoordinator":
        config = config or get_settings()
        executor = build_executor(
            config.sessions_executor,
            config.sessions_max_workers,
            config.sessions_partition_retries,
        )
        return cls(
            source=TsvEventSource(config.sessions_input_base_path),
            store=ReportStore(
                Path(config.report_output_dir) / config.report_file_name,
                config.sessions_quantiles,
            ),
            executor=executor,
            num_partitions=config.sessions_num_partitions,
            gap_seconds=config.processing_session_gap_seconds,
            quantiles=config.sessions_quantiles,
            sketch_level=config.sessions_sketch_level,
        )

    def execute(self, window: ReportWindow) -> list[DatedReportRow]:
        """Compute and commit the rows of `window`; returns the new rows."""
        started = time.perf_counter()
        label = window.date_range_label
        logger.info("run_started", extra={"label": label})

        grouped = self.grouper.group(self.source.partitions(window))
        RECORDS_ACCEPTED.inc(grouped.accepted)
        for reason, count in grouped.dropped.items():
            RECORDS_DROPPED.labels(reason=reason).inc(count)
        if not grouped.accepted:
            logger.warning("no_qualifying_events", extra={"label": label})
            return []

        key_sessions = self.sessionizer.sessionize_all(grouped.partitions)
        window_count = sum(
            len(sessions) for partition in key_sessions for sessions in partition.values()
        )
        SESSIONS_BUILT.inc(window_count)
        logger.info(
            "sessions_built",
            extra={"label": label, "subjects": grouped.key_count, "windows": window_count},
        )

        rows = []
        for metric_name, report in self.pipeline.run(key_sessions):
            if report is None:
                METRICS_NOT_AVAILABLE.inc()
                continue
            rows.append(DatedReportRow.for_window(window, metric_name, report))

        self.store.commit(rows, label)
        REPORT_ROWS_WRITTEN.inc(len(rows))
        elapsed = time.perf_counter() - started
        RUN_DURATION.observe(elapsed)
        logger.info(
            "run_completed",
            extra={"label": label, "rows": len(rows), "seconds": round(elapsed, 3)},
        )
        return rows
