from __future__ import annotations

from typing import Optional

from src.core.errors import EmptyMetricError
from src.core.logger import get_logger
from src.core.schemas.report import MetricReport
from src.jobs.base_job import BaseJob
from src.jobs.metric_aggregator import MetricAggregator
from src.jobs.pageviews_per_session import PageviewsPerSession
from src.jobs.session_length import SessionLength
from src.jobs.sessions_per_user import SessionsPerUser
from src.transformations.sessionizer import KeySessions

logger = get_logger("pipeline")

MetricResult = tuple[str, Optional[MetricReport]]


class SessionMetricsPipeline:
    """Runs every registered metric job over sessionized partitions."""

    def __init__(self, aggregator: MetricAggregator):
        self.aggregator = aggregator
        self.jobs: list[BaseJob] = []

    @classmethod
    def with_default_jobs(cls, aggregator: MetricAggregator) -> "SessionMetricsPipeline":
        pipeline = cls(aggregator)
        pipeline.register_job(SessionsPerUser())
        pipeline.register_job(PageviewsPerSession())
        pipeline.register_job(SessionLength())
        return pipeline

    def register_job(self, job: BaseJob):
        """Register a metric job; results keep registration order."""
        if any(existing.name == job.name for existing in self.jobs):
            raise ValueError(f"metric {job.name!r} is already registered")
        self.jobs.append(job)
        logger.info("job_registered", extra={"job": job.name})

    def run(self, partitions: list[KeySessions]) -> list[MetricResult]:
        """Return `(metric name, report)` per job; None when N/A."""
        results: list[MetricResult] = []
        for job in self.jobs:
            try:
                report = self.aggregator.aggregate(job.name, partitions, job.extract)
            except EmptyMetricError:
                logger.warning("metric_not_available", extra={"metric": job.name})
                report = None
            results.append((job.name, report))
        return results
