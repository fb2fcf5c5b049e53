"""Data-parallel execution primitives.

Work is expressed as a pure function applied to each input partition plus
an associative, commutative combine used to reduce partial results. No
state is shared between partitions, so a failed partition can simply be
run again.

Partitions must be re-iterable (lists, or objects whose ``__iter__`` reopens
their source) and, for the process pool, picklable together with the
function applied to them.
"""

from __future__ import annotations

import contextlib
import functools
from abc import ABC, abstractmethod
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from typing import Callable, Iterable, Sequence, TypeVar

from shared.utils.retry import retry
from src.core.errors import PartitionFailure
from src.core.logger import get_logger

P = TypeVar("P")
R = TypeVar("R")

logger = get_logger("executor")


class _Failed:
    __slots__ = ("error",)

    def __init__(self, error: BaseException):
        self.error = error


def tree_reduce(items: Iterable[R], combine: Callable[[R, R], R]) -> R:
    """Reduce `items` with pairwise rounds: ((a+b)+(c+d))+e."""
    level = list(items)
    if not level:
        raise ValueError("tree_reduce() of empty sequence")
    while len(level) > 1:
        paired = [combine(level[i], level[i + 1]) for i in range(0, len(level) - 1, 2)]
        if len(level) % 2:
            paired.append(level[-1])
        level = paired
    return level[0]


def _combine_pair(combine: Callable[[R, R], R], pair: Sequence[R]) -> R:
    return combine(pair[0], pair[1])


class PartitionExecutor(ABC):
    """Runs a function over partitions, re-running failed ones."""

    def __init__(self, retries: int = 1, retry_delay: float = 0.1):
        if retries < 1:
            raise ValueError("retries must be >= 1")
        self.retries = retries
        self.retry_delay = retry_delay

    @abstractmethod
    def _run_all(self, fn: Callable[[P], R], partitions: list[P]) -> list:
        """Run `fn` once per partition; failures are returned as `_Failed`."""

    def map_partitions(self, fn: Callable[[P], R], partitions: Iterable[P]) -> list[R]:
        partitions = list(partitions)
        outcomes = self._run_all(fn, partitions) if partitions else []
        results = []
        for index, outcome in enumerate(outcomes):
            if isinstance(outcome, _Failed):
                outcome = self._rerun(fn, partitions[index], index, outcome.error)
            results.append(outcome)
        return results

    def reduce(self, items: Iterable[R], combine: Callable[[R, R], R]) -> R:
        """Tree reduction where every round's pairs run as partitions."""
        level = list(items)
        if not level:
            raise ValueError("reduce() of empty sequence")
        step = functools.partial(_combine_pair, combine)
        with self._batch():
            while len(level) > 1:
                pairs = [(level[i], level[i + 1]) for i in range(0, len(level) - 1, 2)]
                merged = self.map_partitions(step, pairs)
                if len(level) % 2:
                    merged.append(level[-1])
                level = merged
        return level[0]

    @contextlib.contextmanager
    def _batch(self):
        """Share workers between consecutive `map_partitions` calls."""
        yield

    def _rerun(self, fn, partition, index: int, error: BaseException):
        logger.warning(
            "partition_failed",
            extra={"partition": index, "error": repr(error)},
        )
        remaining = self.retries - 1
        if remaining == 0:
            raise PartitionFailure(index, 1) from error

        def on_retry(attempt: int, exc: BaseException, delay: float) -> None:
            logger.warning(
                "partition_retry",
                extra={"partition": index, "attempt": attempt + 1, "error": repr(exc)},
            )

        try:
            return retry(
                lambda: fn(partition),
                retries=remaining,
                base_delay=self.retry_delay,
                on_retry=on_retry,
            )
        except Exception as exc:  # noqa: BLE001
            raise PartitionFailure(index, self.retries) from exc


class SerialExecutor(PartitionExecutor):
    """Runs partitions one after another in the calling thread."""

    def _run_all(self, fn, partitions):
        outcomes = []
        for partition in partitions:
            try:
                outcomes.append(fn(partition))
            except Exception as exc:  # noqa: BLE001
                outcomes.append(_Failed(exc))
        return outcomes


class PoolExecutor(PartitionExecutor):
    """Runs partitions on a concurrent.futures thread or process pool."""

    def __init__(
        self,
        kind: str = "threads",
        max_workers: int = 4,
        retries: int = 1,
        retry_delay: float = 0.1,
    ):
        super().__init__(retries=retries, retry_delay=retry_delay)
        if kind not in ("threads", "processes"):
            raise ValueError(f"unknown pool kind: {kind}")
        self.kind = kind
        self.max_workers = max_workers
        self._pool: Executor | None = None

    def _make_pool(self) -> Executor:
        if self.kind == "processes":
            return ProcessPoolExecutor(max_workers=self.max_workers)
        return ThreadPoolExecutor(max_workers=self.max_workers)

    @contextlib.contextmanager
    def _batch(self):
        if self._pool is not None:
            yield
            return
        with self._make_pool() as pool:
            self._pool = pool
            try:
                yield
            finally:
                self._pool = None

    def _run_all(self, fn, partitions):
        with self._batch():
            futures = [self._pool.submit(fn, partition) for partition in partitions]
            outcomes = []
            for future in futures:
                try:
                    outcomes.append(future.result())
                except Exception as exc:  # noqa: BLE001
                    outcomes.append(_Failed(exc))
        return outcomes


def build_executor(kind: str, max_workers: int, retries: int) -> PartitionExecutor:
    if kind == "serial":
        return SerialExecutor(retries=retries)
    return PoolExecutor(kind=kind, max_workers=max_workers, retries=retries)
