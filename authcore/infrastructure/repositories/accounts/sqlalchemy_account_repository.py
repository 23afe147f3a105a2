# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from authcore.domain.accounts.entities import AccountRecord
from authcore.domain.accounts.exceptions import DuplicateAccountError
from authcore.domain.accounts.repositories import CredentialStore
from authcore.infrastructure.clock import as_utc
from authcore.infrastructure.db.models import Account
from authcore.infrastructure.unit_of_work import unit_of_work_scope
from authcore.shared.logging import logger


def _to_record(row: Account) -> AccountRecord:
    return AccountRecord(
        id=row.id,
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        created_at=as_utc(row.created_at),
    )


class SqlAlchemyCredentialStore(CredentialStore):
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def create_account(self, username: str, email: str, password_hash: str) -> AccountRecord:
        try:
            with unit_of_work_scope(self._session_factory, "create_account") as session:
                row = Account(
                    username=username,
                    email=email,
                    password_hash=password_hash,
                    created_at=datetime.now(UTC),
                )
                session.add(row)
                session.flush()
                record = _to_record(row)
        except IntegrityError as exc:
            field = self._conflicting_field(username, email)
            logger.info(f"credential_store: duplicate on insert field={field or 'unknown'}")
            raise DuplicateAccountError(field) from exc
        return record

    def find_by_username(self, username: str) -> AccountRecord | None:
        with unit_of_work_scope(self._session_factory, "find_by_username") as session:
            row = session.scalars(select(Account).where(Account.username == username)).first()
            return _to_record(row) if row else None

    def find_by_id(self, account_id: int) -> AccountRecord | None:
        with unit_of_work_scope(self._session_factory, "find_by_id") as session:
            row = session.get(Account, account_id)
            return _to_record(row) if row else None

    def count(self) -> int:
        with unit_of_work_scope(self._session_factory, "count_accounts") as session:
            return session.query(Account).count()

    def _conflicting_field(self, username: str, email: str) -> str | None:
        with unit_of_work_scope(self._session_factory, "find_conflict") as session:
            row = session.scalars(
                select(Account).where(or_(Account.username == username, Account.email == email))
            ).first()
        if row is None:
            return None
        return "username" if row.username == username else "email"
