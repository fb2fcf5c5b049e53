import random
import time
from typing import Callable, Iterable, Optional, TypeVar

T = TypeVar("T")


def retry(
    func: Callable[[], T],
    retries: int = 3,
    base_delay: float = 0.1,
    max_delay: float = 5.0,
    jitter: float = 0.1,
    retry_on: Iterable[type[BaseException]] = (Exception,),
    on_retry: Optional[Callable[[int, BaseException, float], None]] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """Call `func` until it succeeds, at most `retries` times.

    Delays grow exponentially from `base_delay` up to `max_delay`. The last
    exception is re-raised once attempts are exhausted. Only safe for
    functions that are pure or idempotent.
    """
    if retries < 1:
        raise ValueError("retries must be >= 1")
    retry_on = tuple(retry_on)
    delay = base_delay
    for attempt in range(1, retries + 1):
        try:
            return func()
        except retry_on as exc:  # type: ignore[misc]
            if attempt == retries:
                raise
            sleep_for = min(delay, max_delay) + random.uniform(0, delay * jitter)
            if on_retry:
                on_retry(attempt, exc, sleep_for)
            (sleep or time.sleep)(sleep_for)
            delay = min(delay * 2, max_delay)
    # Unreachable
    raise RuntimeError("retry exhausted")
