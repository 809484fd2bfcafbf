# core/rate_limit.py
from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Dict


@dataclass
class Bucket:
    tokens: float
    last: float


class TokenBucketLimiter:
    """
    Token bucket keyed by caller (e.g. "login:<ip>"): 'rate' tokens per
    'per_seconds', bursting up to 'capacity'. Safe to share between threads.
    """

    def __init__(self, rate: float, per_seconds: float, capacity: float):
        self.rate = rate
        self.per_seconds = per_seconds
        self.capacity = capacity
        self._buckets: Dict[str, Bucket] = {}
        self._lock = threading.Lock()
        # an untouched bucket is back to full after this long
        self._idle_after = capacity * per_seconds / rate
        self._last_sweep = time.monotonic()

    def _sweep(self, now: float) -> None:
        # a full bucket is the same as no bucket, so forget idle callers
        if now - self._last_sweep < self._idle_after:
            return
        self._last_sweep = now
        idle = [k for k, b in self._buckets.items() if now - b.last >= self._idle_after]
        for k in idle:
            del self._buckets[k]

    def _refill(self, key: str, now: float) -> Bucket:
        self._sweep(now)
        b = self._buckets.get(key)
        if b is None:
            b = self._buckets[key] = Bucket(tokens=self.capacity, last=now)
            return b
        elapsed = now - b.last
        b.tokens = min(self.capacity, b.tokens + (elapsed / self.per_seconds) * self.rate)
        b.last = now
        return b

    def allow(self, key: str, cost: float = 1.0) -> bool:
        with self._lock:
            b = self._refill(key, time.monotonic())
            if b.tokens >= cost:
                b.tokens -= cost
                return True
            return False

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._buckets)

    def retry_after(self, key: str, cost: float = 1.0) -> int:
        """Whole seconds until `key` can spend `cost` again (0 if it already can)."""
        with self._lock:
            b = self._refill(key, time.monotonic())
            missing = cost - b.tokens
        if missing <= 0:
            return 0
        return math.ceil(missing * self.per_seconds / self.rate)
