# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time
from collections import defaultdict, deque
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from threading import Lock

from flask import Request, jsonify, request

from authcore.shared.logging import logger


@dataclass
class Bucket:
    timestamps: deque[float]


class InMemoryRateLimiter:
    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._limit = max(1, int(limit))
        self._window = max(0.1, float(window_seconds))
        self._clock = clock
        self._lock = Lock()
        self._buckets: dict[str, Bucket] = defaultdict(lambda: Bucket(deque(maxlen=self._limit)))
        self._last_sweep = clock()

    def allow(self, key: str) -> bool:
        with self._lock:
            now = self._clock()
            self._sweep(now)
            bucket = self._buckets[key]
            # Drop old
            while bucket.timestamps and (now - bucket.timestamps[0]) > self._window:
                bucket.timestamps.popleft()
            if len(bucket.timestamps) >= self._limit:
                return False
            bucket.timestamps.append(now)
            return True

    def _sweep(self, now: float) -> None:
        # Buckets whose newest hit is outside the window carry no state.
        if now - self._last_sweep < self._window:
            return
        self._last_sweep = now
        idle = [
            key
            for key, bucket in self._buckets.items()
            if not bucket.timestamps or now - bucket.timestamps[-1] > self._window
        ]
        for key in idle:
            del self._buckets[key]


def client_key(req: Request) -> str:
    # remote_addr is only rewritten from X-Forwarded-For when ProxyFix is
    # installed for a configured number of trusted proxies.
    return req.remote_addr or "unknown"


def rate_limited(limiter: InMemoryRateLimiter | None, f: Callable) -> Callable:
    if limiter is None:
        return f

    @wraps(f)
    def wrapper(*args, **kwargs):
        key = f"{request.path}:{client_key(request)}"
        if not limiter.allow(key):
            logger.warning(f"rate_limit: rejected {request.method} {request.path}")
            return jsonify({"error": "rate_limited"}), 429
        return f(*args, **kwargs)

    return wrapper


__all__ = ["InMemoryRateLimiter", "client_key", "rate_limited"]
