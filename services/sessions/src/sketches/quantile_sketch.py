"""Mergeable approximate quantiles over non-negative integers.

The sketch is a dyadic histogram. For a multiset whose largest value is M
every value v is counted in bucket ``v >> shift`` where

    shift = max(0, M.bit_length() - level)

so at most ``2 ** level`` buckets are kept and each bucket spans
``2 ** shift`` consecutive integers. The bucket layout depends only on the
multiset, never on the order of inserts or merges, which makes `merge`
associative and commutative. Quantile queries return the span of the
bucket that holds the requested rank, clamped to the exact min/max.
"""

from __future__ import annotations

import math
from collections import Counter
from typing import Iterable

DEFAULT_LEVEL = 8


class QuantileSketch:
    __slots__ = ("level", "count", "min", "max", "_shift", "_buckets")

    def __init__(self, level: int = DEFAULT_LEVEL):
        if level < 1:
            raise ValueError("level must be >= 1")
        self.level = level
        self.count = 0
        self.min: int | None = None
        self.max: int | None = None
        self._shift = 0
        self._buckets: Counter = Counter()

    @classmethod
    def from_values(
        cls, values: Iterable[int], level: int = DEFAULT_LEVEL
    ) -> "QuantileSketch":
        sketch = cls(level)
        for value in values:
            sketch.insert(value)
        return sketch

    @property
    def bucket_width(self) -> int:
        """Resolution of the sketch: the span of integers sharing a bucket."""
        return 1 << self._shift

    def _shift_for(self, maximum: int) -> int:
        return max(0, maximum.bit_length() - self.level)

    def _rescale(self, shift: int) -> None:
        delta = shift - self._shift
        if delta <= 0:
            return
        rescaled: Counter = Counter()
        for bucket, n in self._buckets.items():
            rescaled[bucket >> delta] += n
        self._buckets = rescaled
        self._shift = shift

    def insert(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"expected an int, got {type(value).__name__}")
        if value < 0:
            raise ValueError(f"negative values are not supported: {value}")
        if self.max is None or value > self.max:
            self.max = value
            self._rescale(self._shift_for(value))
        if self.min is None or value < self.min:
            self.min = value
        self._buckets[value >> self._shift] += 1
        self.count += 1

    def merge(self, other: "QuantileSketch") -> "QuantileSketch":
        """Return a new sketch summarising both inputs; neither is modified."""
        if other.level != self.level:
            raise ValueError(
                f"cannot merge sketches of level {self.level} and {other.level}"
            )
        merged = QuantileSketch(self.level)
        parts = [s for s in (self, other) if s.count]
        if not parts:
            return merged
        merged._shift = merged._shift_for(max(s.max for s in parts))
        for part in parts:
            delta = merged._shift - part._shift
            for bucket, n in part._buckets.items():
                merged._buckets[bucket >> delta] += n
        merged.count = sum(s.count for s in parts)
        merged.min = min(s.min for s in parts)
        merged.max = max(s.max for s in parts)
        return merged

    __add__ = merge

    def quantile_bounds(self, q: float) -> tuple[float, float]:
        """Return (low, high) with low <= true q-quantile < high."""
        if not 0.0 <= q <= 1.0:
            raise ValueError(f"quantile level {q} is outside [0, 1]")
        if not self.count:
            raise ValueError("quantile_bounds() of an empty sketch")
        rank = min(math.floor(q * self.count), self.count - 1)
        width = self.bucket_width
        seen = 0
        for bucket in sorted(self._buckets):
            seen += self._buckets[bucket]
            if seen > rank:
                low = max(bucket * width, self.min)
                high = min((bucket + 1) * width, self.max + 1)
                return float(low), float(high)
        raise AssertionError("bucket counts do not add up to count")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QuantileSketch):
            return NotImplemented
        return (
            self.level == other.level
            and self.count == other.count
            and self.min == other.min
            and self.max == other.max
            and self._shift == other._shift
            and self._buckets == other._buckets
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"QuantileSketch(level={self.level}, count={self.count}, "
            f"min={self.min}, max={self.max}, buckets={len(self._buckets)})"
        )


def merge_sketches(left: QuantileSketch, right: QuantileSketch) -> QuantileSketch:
    return left.merge(right)
