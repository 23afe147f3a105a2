from __future__ import annotations

import threading
from collections.abc import Iterator
from pathlib import Path

import pytest
from sqlalchemy.engine import Engine

from authcore.application.services.account_service import AccountService
from authcore.application.services.session_manager import SessionManager
from authcore.domain.accounts.entities import Account
from authcore.domain.accounts.exceptions import DuplicateAccountError
from authcore.infrastructure.audit import AuditLogger
from authcore.infrastructure.db import create_db_engine, create_session_factory, init_db
from authcore.infrastructure.repositories.accounts.sqlalchemy_account_repository import (
    SqlAlchemyCredentialStore,
)
from authcore.infrastructure.repositories.sessions.sqlalchemy_session_store import (
    SqlAlchemySessionStore,
)
from authcore.shared.config import DatabaseConfig

from .conftest import CountingHasher, FrozenClock


@pytest.fixture()
def engine(tmp_path: Path) -> Iterator[Engine]:
    engine = create_db_engine(DatabaseConfig(DATABASE_URL=f"sqlite:///{tmp_path / 'auth.db'}"))
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def store(engine: Engine) -> SqlAlchemyCredentialStore:
    return SqlAlchemyCredentialStore(create_session_factory(engine))


def test_create_and_find(store: SqlAlchemyCredentialStore) -> None:
    created = store.create_account("alice", "a@x.com", "scrypt:hash")

    by_name = store.find_by_username("alice")
    by_id = store.find_by_id(created.id)

    assert by_name == created
    assert by_id == created
    assert created.password_hash == "scrypt:hash"
    assert created.created_at.tzinfo is not None


def test_find_missing_returns_none(store: SqlAlchemyCredentialStore) -> None:
    assert store.find_by_username("nobody") is None
    assert store.find_by_id(999) is None


def test_record_repr_hides_hash(store: SqlAlchemyCredentialStore) -> None:
    created = store.create_account("alice", "a@x.com", "scrypt:very-secret")

    assert "very-secret" not in repr(created)
    assert not hasattr(created.to_account(), "password_hash")


@pytest.mark.parametrize(
    ("username", "email", "field"),
    [("alice", "other@x.com", "username"), ("bob", "a@x.com", "email")],
)
def test_duplicate_is_rejected(
    store: SqlAlchemyCredentialStore, username: str, email: str, field: str
) -> None:
    store.create_account("alice", "a@x.com", "hash")

    with pytest.raises(DuplicateAccountError) as exc_info:
        store.create_account(username, email, "hash")

    assert exc_info.value.field == field
    assert store.count() == 1


def test_concurrent_registration_creates_one_account(engine: Engine) -> None:
    factory = create_session_factory(engine)
    store = SqlAlchemyCredentialStore(factory)
    service = AccountService(
        accounts=store,
        sessions=SessionManager(store=SqlAlchemySessionStore(factory), clock=FrozenClock()),
        password_hasher=CountingHasher(),
        audit=AuditLogger(),
    )
    barrier = threading.Barrier(2)
    results: list[Account | BaseException] = []
    lock = threading.Lock()

    def register(email: str) -> None:
        barrier.wait()
        try:
            outcome: Account | BaseException = service.register("alice", email, "s3cret1")
        except DuplicateAccountError as exc:
            outcome = exc
        with lock:
            results.append(outcome)

    threads = [
        threading.Thread(target=register, args=(email,))
        for email in ("one@x.com", "two@x.com")
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    accounts = [r for r in results if isinstance(r, Account)]
    duplicates = [r for r in results if isinstance(r, DuplicateAccountError)]
    assert len(accounts) == 1
    assert len(duplicates) == 1
    assert store.count() == 1
