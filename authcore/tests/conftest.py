from __future__ import annotations

from datetime import UTC, datetime, timedelta
from threading import Lock

import pytest

from authcore.application.services.account_service import AccountService
from authcore.application.services.session_manager import SessionManager
from authcore.domain.accounts.entities import AccountRecord
from authcore.domain.accounts.exceptions import DuplicateAccountError
from authcore.domain.accounts.repositories import Clock, CredentialStore, PasswordHasher
from authcore.infrastructure.audit import AuditLogger
from authcore.infrastructure.repositories.sessions.memory_session_store import (
    InMemorySessionStore,
)


class FrozenClock(Clock):
    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs: float) -> None:
        self._now += timedelta(**kwargs)


class InMemoryCredentialStore(CredentialStore):
    def __init__(self) -> None:
        self._by_username: dict[str, AccountRecord] = {}
        self._seq = 1
        self._lock = Lock()

    def create_account(self, username: str, email: str, password_hash: str) -> AccountRecord:
        with self._lock:
            if username in self._by_username:
                raise DuplicateAccountError("username")
            if any(r.email == email for r in self._by_username.values()):
                raise DuplicateAccountError("email")
            record = AccountRecord(
                id=self._seq,
                username=username,
                email=email,
                password_hash=password_hash,
                created_at=datetime.now(UTC),
            )
            self._seq += 1
            self._by_username[username] = record
            return record

    def find_by_username(self, username: str) -> AccountRecord | None:
        return self._by_username.get(username)

    def find_by_id(self, account_id: int) -> AccountRecord | None:
        return next((r for r in self._by_username.values() if r.id == account_id), None)


class CountingHasher(PasswordHasher):
    """Fast, salted-looking hasher that records every call."""

    def __init__(self) -> None:
        self.hash_calls = 0
        self.verify_calls: list[str] = []

    def hash(self, password: str) -> str:
        self.hash_calls += 1
        return f"hashed${self.hash_calls}${password}"

    def verify(self, password: str, hashed: str) -> bool:
        self.verify_calls.append(hashed)
        return hashed.split("$", 2)[-1] == password


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def credential_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture()
def hasher() -> CountingHasher:
    return CountingHasher()


@pytest.fixture()
def session_manager(clock: FrozenClock) -> SessionManager:
    return SessionManager(store=InMemorySessionStore(), clock=clock, ttl=timedelta(hours=24))


@pytest.fixture()
def account_service(
    credential_store: InMemoryCredentialStore,
    session_manager: SessionManager,
    hasher: CountingHasher,
) -> AccountService:
    return AccountService(
        accounts=credential_store,
        sessions=session_manager,
        password_hasher=hasher,
        audit=AuditLogger(),
    )
