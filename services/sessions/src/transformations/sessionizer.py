"""Fold a subject's sorted timestamps into session windows.

A timestamp joins the current session when it is at most `gap_seconds`
after the session's last timestamp; otherwise it opens a new session.
"""

from __future__ import annotations

import functools
from typing import Sequence

from src.core.executor import PartitionExecutor

DEFAULT_GAP_SECONDS = 1800

SessionWindow = tuple[int, ...]
KeySessions = dict[str, list[SessionWindow]]


def sessionize(
    timestamps: Sequence[int], gap_seconds: int = DEFAULT_GAP_SECONDS
) -> list[SessionWindow]:
    """Split ascending `timestamps` into maximal session windows.

    >>> sessionize([1000, 1500, 4000, 39000])
    [(1000, 1500), (4000,), (39000,)]
    """
    sessions: list[list[int]] = []
    previous = None
    for timestamp in timestamps:
        if previous is not None and timestamp < previous:
            raise ValueError("timestamps must be sorted in ascending order")
        if sessions and timestamp - sessions[-1][-1] <= gap_seconds:
            sessions[-1].append(timestamp)
        else:
            sessions.append([timestamp])
        previous = timestamp
    return [tuple(session) for session in sessions]


def sessionize_partition(
    runs: dict[str, list[int]], gap_seconds: int = DEFAULT_GAP_SECONDS
) -> KeySessions:
    return {key: sessionize(run, gap_seconds) for key, run in runs.items()}


class Sessionizer:
    def __init__(self, executor: PartitionExecutor, gap_seconds: int = DEFAULT_GAP_SECONDS):
        if gap_seconds <= 0:
            raise ValueError("gap_seconds must be positive")
        self.executor = executor
        self.gap_seconds = gap_seconds

    def sessionize_all(self, partitions: list[dict[str, list[int]]]) -> list[KeySessions]:
        """Sessionize fully grouped partitions, keeping the partitioning."""
        return self.executor.map_partitions(
            functools.partial(sessionize_partition, gap_seconds=self.gap_seconds),
            partitions,
        )
