# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from threading import Lock

from authcore.domain.accounts.entities import Session
from authcore.domain.accounts.repositories import SessionStore


class InMemorySessionStore(SessionStore):
    """Process-local session table; sessions do not survive a restart."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = Lock()

    def add(self, session: Session) -> None:
        with self._lock:
            self._sessions[session.token_digest] = session

    def get(self, token_digest: str) -> Session | None:
        with self._lock:
            return self._sessions.get(token_digest)

    def revoke(self, token_digest: str, now: datetime) -> bool:
        with self._lock:
            session = self._sessions.get(token_digest)
            if session is None or not session.is_active(now):
                return False
            self._sessions[token_digest] = replace(session, revoked_at=now)
            return True

    def extend(self, token_digest: str, expires_at: datetime) -> None:
        with self._lock:
            session = self._sessions.get(token_digest)
            if session is not None and session.revoked_at is None:
                self._sessions[token_digest] = replace(session, expires_at=expires_at)

    def purge(self, now: datetime) -> int:
        with self._lock:
            stale = [
                digest
                for digest, session in self._sessions.items()
                if not session.is_active(now)
            ]
            for digest in stale:
                del self._sessions[digest]
            return len(stale)
