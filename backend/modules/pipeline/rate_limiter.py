"""
modules/pipeline/rate_limiter.py
----------------------------------
Fixed-interval pacing for sequential third-party calls.

The pipeline is strictly sequential; each limiter guarantees a minimum gap
between consecutive wait() returns. The first wait() never sleeps.
Tests inject NoDelayRateLimiter (or a FixedIntervalRateLimiter with a fake
sleep/clock) so nothing actually pauses.
"""

from __future__ import annotations
import time
from typing import Callable, Optional, Protocol


class RateLimiter(Protocol):
    def wait(self) -> None: ...


class NoDelayRateLimiter:
    """Never sleeps."""

    def wait(self) -> None:
        return None


class FixedIntervalRateLimiter:
    """Ticker: at most one call per *interval_ms*."""

    def __init__(
        self,
        interval_ms: int,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.interval_s = max(0, interval_ms) / 1000.0
        self._sleep = sleep
        self._clock = clock
        self._last: Optional[float] = None

    def wait(self) -> None:
        now = self._clock()
        if self._last is not None:
            remaining = self.interval_s - (now - self._last)
            if remaining > 0:
                self._sleep(remaining)
                now = self._clock()
        self._last = now


def limiter_for(interval_ms: int) -> RateLimiter:
    return FixedIntervalRateLimiter(interval_ms) if interval_ms > 0 else NoDelayRateLimiter()
