"""Group (key, timestamp) observations into sorted per-key runs.

Each input partition is grouped locally (one sort per key), split into
`num_partitions` buckets by a stable hash of the key, and the partial
results for a bucket are tree-reduced with `merge_partials`. Partial runs
are combined with a linear merge of two sorted runs, so the final sequence
of a key does not depend on how the input was partitioned or in which
order partials were combined.
"""

from __future__ import annotations

import functools
import hashlib
import heapq
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Iterable

from src.core.errors import MalformedTimestamp
from src.core.executor import PartitionExecutor, tree_reduce
from src.core.logger import get_logger
from src.core.schemas.event_source import EventRecord, parse_timestamp

logger = get_logger("grouping")

DROP_NOT_QUALIFYING = "not_qualifying"
DROP_MISSING_KEY = "missing_key"
DROP_MALFORMED_TIMESTAMP = "malformed_timestamp"


@dataclass(frozen=True)
class PartialGrouping:
    """Sorted timestamp runs per key plus record bookkeeping."""

    runs: dict[str, list[int]] = field(default_factory=dict)
    accepted: int = 0
    dropped: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class GroupingResult:
    partitions: list[dict[str, list[int]]]
    accepted: int
    dropped: dict[str, int]

    @property
    def key_count(self) -> int:
        return sum(len(p) for p in self.partitions)


def bucket_for(key: str, num_buckets: int) -> int:
    digest = hashlib.sha1(key.encode("utf-8")).hexdigest()
    return int(digest[:8], 16) % num_buckets


def merge_runs(left: list[int], right: list[int]) -> list[int]:
    return list(heapq.merge(left, right))


def merge_partials(left: PartialGrouping, right: PartialGrouping) -> PartialGrouping:
    runs = dict(left.runs)
    for key, run in right.runs.items():
        runs[key] = merge_runs(runs[key], run) if key in runs else run
    dropped = Counter(left.dropped)
    dropped.update(right.dropped)
    return PartialGrouping(
        runs=runs, accepted=left.accepted + right.accepted, dropped=dict(dropped)
    )


def group_partition(
    records: Iterable[EventRecord], num_buckets: int
) -> list[PartialGrouping]:
    """Group one input partition and split it into hash buckets."""
    local: dict[str, list[int]] = defaultdict(list)
    dropped: Counter = Counter()
    accepted = 0
    for key, raw_timestamp, is_qualifying in records:
        if not is_qualifying:
            dropped[DROP_NOT_QUALIFYING] += 1
            continue
        if not key:
            dropped[DROP_MISSING_KEY] += 1
            continue
        try:
            timestamp = parse_timestamp(raw_timestamp)
        except MalformedTimestamp:
            dropped[DROP_MALFORMED_TIMESTAMP] += 1
            continue
        local[key].append(timestamp)
        accepted += 1

    buckets = [dict() for _ in range(num_buckets)]
    for key, run in local.items():
        run.sort()
        buckets[bucket_for(key, num_buckets)][key] = run

    # Bookkeeping rides on bucket 0 so it is counted exactly once.
    partials = [PartialGrouping(runs=runs) for runs in buckets]
    partials[0] = PartialGrouping(
        runs=buckets[0], accepted=accepted, dropped=dict(dropped)
    )
    return partials


class PartitionGrouper:
    def __init__(self, executor: PartitionExecutor, num_partitions: int = 16):
        if num_partitions < 1:
            raise ValueError("num_partitions must be >= 1")
        self.executor = executor
        self.num_partitions = num_partitions

    def group(self, partitions: Iterable[Iterable[EventRecord]]) -> GroupingResult:
        per_input = self.executor.map_partitions(
            functools.partial(group_partition, num_buckets=self.num_partitions),
            partitions,
        )
        if not per_input:
            return GroupingResult(
                partitions=[{} for _ in range(self.num_partitions)],
                accepted=0,
                dropped={},
            )

        by_bucket = [
            [partials[b] for partials in per_input] for b in range(self.num_partitions)
        ]
        reduced = self.executor.map_partitions(
            functools.partial(tree_reduce, combine=merge_partials), by_bucket
        )
        totals = tree_reduce(
            [PartialGrouping(accepted=r.accepted, dropped=r.dropped) for r in reduced],
            merge_partials,
        )
        result = GroupingResult(
            partitions=[r.runs for r in reduced],
            accepted=totals.accepted,
            dropped=totals.dropped,
        )
        logger.info(
            "records_grouped",
            extra={
                "input_partitions": len(per_input),
                "accepted": result.accepted,
                "dropped": result.dropped,
                "distinct_subjects": result.key_count,
            },
        )
        if result.dropped.get(DROP_MALFORMED_TIMESTAMP):
            logger.warning(
                "malformed_timestamps_dropped",
                extra={"count": result.dropped[DROP_MALFORMED_TIMESTAMP]},
            )
        return result
