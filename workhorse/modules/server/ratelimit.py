import time
from typing import Callable


class TokenBucket:
    """Token bucket: `rate` tokens per `period` seconds, holding at most `burst`."""

    def __init__(self, rate: int, burst: int, period: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self.rate = rate
        self.burst = burst
        self.period = period
        self.clock = clock
        self.tokens = float(burst)
        self.last_refill = clock()

    def _refill(self) -> None:
        now = self.clock()
        elapsed = max(0.0, now - self.last_refill)
        self.tokens = min(float(self.burst), self.tokens + elapsed * self.rate / self.period)
        self.last_refill = now

    def allow(self) -> bool:
        self._refill()
        if self.tokens >= 1.0:
            self.tokens -= 1.0
            return True
        return False
