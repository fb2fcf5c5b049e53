"""Exact count/min/max plus approximate quantiles for one metric.

Every partition is summarised locally (exact reducer and a QuantileSketch
side by side), then the partial summaries are tree-reduced. Quantiles are
only queried on the fully merged sketch.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence

from src.core.errors import EmptyMetricError
from src.core.executor import PartitionExecutor
from src.core.logger import get_logger
from src.core.schemas.report import DEFAULT_QUANTILES, MetricReport
from src.sketches.quantile_sketch import DEFAULT_LEVEL, QuantileSketch

logger = get_logger("metric_aggregator")


@dataclass(frozen=True)
class MetricSummary:
    count: int = 0
    min: Optional[int] = None
    max: Optional[int] = None


def combine_summaries(left: MetricSummary, right: MetricSummary) -> MetricSummary:
    if not left.count:
        return right
    if not right.count:
        return left
    return MetricSummary(
        count=left.count + right.count,
        min=min(left.min, right.min),
        max=max(left.max, right.max),
    )


@dataclass(frozen=True)
class PartitionStatistics:
    summary: MetricSummary
    sketch: QuantileSketch


def combine_statistics(
    left: PartitionStatistics, right: PartitionStatistics
) -> PartitionStatistics:
    return PartitionStatistics(
        summary=combine_summaries(left.summary, right.summary),
        sketch=left.sketch.merge(right.sketch),
    )


def summarize_partition(
    partition,
    level: int = DEFAULT_LEVEL,
    extract: Optional[Callable[[object], Iterable[int]]] = None,
) -> PartitionStatistics:
    values = extract(partition) if extract is not None else partition
    sketch = QuantileSketch(level)
    count = 0
    lowest = highest = None
    for value in values:
        sketch.insert(value)
        count += 1
        if lowest is None or value < lowest:
            lowest = value
        if highest is None or value > highest:
            highest = value
    return PartitionStatistics(
        summary=MetricSummary(count=count, min=lowest, max=highest), sketch=sketch
    )


class MetricAggregator:
    def __init__(
        self,
        executor: PartitionExecutor,
        quantiles: Sequence[float] = DEFAULT_QUANTILES,
        sketch_level: int = DEFAULT_LEVEL,
    ):
        self.executor = executor
        self.quantiles = tuple(quantiles)
        self.sketch_level = sketch_level

    def aggregate(
        self,
        metric_name: str,
        partitions: Iterable,
        extract: Optional[Callable[[object], Iterable[int]]] = None,
    ) -> MetricReport:
        """Build the report of `metric_name` over partitioned observations.

        `extract`, when given, turns each partition into its observations
        inside the worker; otherwise partitions are iterables of ints.

        Raises:
            EmptyMetricError: no partition produced any observation.
        """
        partials = self.executor.map_partitions(
            functools.partial(
                summarize_partition, level=self.sketch_level, extract=extract
            ),
            partitions,
        )
        if not partials:
            raise EmptyMetricError(metric_name)
        total = self.executor.reduce(partials, combine_statistics)
        summary = total.summary
        if not summary.count:
            raise EmptyMetricError(metric_name)

        report = MetricReport(
            count=summary.count,
            min=summary.min,
            max=summary.max,
            quantile_bounds={q: total.sketch.quantile_bounds(q) for q in self.quantiles},
        )
        logger.info(
            "metric_aggregated",
            extra={
                "metric": metric_name,
                "count": report.count,
                "resolution": total.sketch.bucket_width,
            },
        )
        return report
