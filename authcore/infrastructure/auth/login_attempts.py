# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import time
from collections import defaultdict, deque
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

from authcore.shared.logging import logger


@dataclass
class LoginAttempt:
    timestamp: float
    success: bool
    ip_address: str | None = None


class LoginAttemptsTracker:
    """Counts failed logins per submitted username and locks it out past a threshold.

    Keys are whatever username the client sent, so unknown and existing
    accounts are treated the same way. Usernames with no failure inside the
    attempt window and no active lockout are swept, at most once per window.
    """

    def __init__(
        self,
        *,
        max_attempts: int = 5,
        lockout_seconds: float = 15 * 60,
        attempt_window: float = 60 * 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._max_attempts = max_attempts
        self._lockout_seconds = lockout_seconds
        self._attempt_window = attempt_window
        self._clock = clock
        self._attempts: dict[str, deque[LoginAttempt]] = defaultdict(
            lambda: deque(maxlen=self._max_attempts * 2)
        )
        self._lock = Lock()
        self._lockouts: dict[str, float] = {}  # username -> unlock_time
        self._last_sweep = clock()

    def record_attempt(
        self, username: str, success: bool, ip_address: str | None = None
    ) -> None:
        with self._lock:
            now = self._clock()
            self._sweep(now)
            if success:
                self._attempts.pop(username, None)
                self._lockouts.pop(username, None)
                return

            self._attempts[username].append(
                LoginAttempt(timestamp=now, success=False, ip_address=ip_address)
            )
            self._check_and_lock(username)

    def get_lockout_remaining(self, username: str) -> float:
        with self._lock:
            return self._remaining_locked(username)

    def _remaining_locked(self, username: str) -> float:
        unlock_time = self._lockouts.get(username)
        if unlock_time is None:
            return 0.0
        remaining = unlock_time - self._clock()
        if remaining <= 0:
            del self._lockouts[username]
            self._attempts.pop(username, None)
            logger.info(f"login_attempts: lockout expired for user={username}")
            return 0.0
        return remaining

    def _recent_failures(self, username: str) -> list[LoginAttempt]:
        if username not in self._attempts:
            return []
        cutoff = self._clock() - self._attempt_window
        return [
            attempt
            for attempt in self._attempts[username]
            if not attempt.success and attempt.timestamp > cutoff
        ]

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < self._attempt_window:
            return
        self._last_sweep = now
        cutoff = now - self._attempt_window
        stale = [
            username
            for username, attempts in self._attempts.items()
            if (not attempts or attempts[-1].timestamp <= cutoff)
            and self._lockouts.get(username, 0.0) <= now
        ]
        for username in stale:
            del self._attempts[username]
            self._lockouts.pop(username, None)
        for username in [u for u, unlock in self._lockouts.items() if unlock <= now]:
            del self._lockouts[username]
        if stale:
            logger.debug(f"login_attempts: swept {len(stale)} idle usernames")

    def _check_and_lock(self, username: str) -> None:
        failed_attempts = self._recent_failures(username)
        if len(failed_attempts) < self._max_attempts:
            return

        self._lockouts[username] = self._clock() + self._lockout_seconds
        ips = {attempt.ip_address for attempt in failed_attempts if attempt.ip_address}
        logger.warning(
            f"login_attempts: ACCOUNT LOCKED user={username} "
            f"failed_attempts={len(failed_attempts)} "
            f"lockout_duration={self._lockout_seconds}s "
            f"ip_addresses={sorted(ips) if ips else 'unknown'}"
        )


__all__ = ["LoginAttempt", "LoginAttemptsTracker"]
