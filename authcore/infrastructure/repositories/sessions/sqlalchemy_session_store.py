# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from sqlalchemy import delete, or_, select, update
from sqlalchemy.orm import Session as OrmSession

from authcore.domain.accounts.entities import Session
from authcore.domain.accounts.repositories import SessionStore
from authcore.infrastructure.clock import as_utc
from authcore.infrastructure.db.models import SessionRecord
from authcore.infrastructure.unit_of_work import unit_of_work_scope


def _to_session(row: SessionRecord) -> Session:
    return Session(
        token_digest=row.token_digest,
        account_id=row.account_id,
        issued_at=as_utc(row.issued_at),
        expires_at=as_utc(row.expires_at),
        revoked_at=as_utc(row.revoked_at) if row.revoked_at else None,
    )


class SqlAlchemySessionStore(SessionStore):
    def __init__(self, session_factory: Callable[[], OrmSession]):
        self._session_factory = session_factory

    def add(self, session: Session) -> None:
        with unit_of_work_scope(self._session_factory, "add_session") as db:
            db.add(
                SessionRecord(
                    token_digest=session.token_digest,
                    account_id=session.account_id,
                    issued_at=session.issued_at,
                    expires_at=session.expires_at,
                )
            )

    def get(self, token_digest: str) -> Session | None:
        with unit_of_work_scope(self._session_factory, "get_session") as db:
            row = db.scalars(
                select(SessionRecord).where(SessionRecord.token_digest == token_digest)
            ).first()
            return _to_session(row) if row else None

    def revoke(self, token_digest: str, now: datetime) -> bool:
        # A single conditional UPDATE so concurrent revokes cannot both succeed.
        with unit_of_work_scope(self._session_factory, "revoke_session") as db:
            result = db.execute(
                update(SessionRecord)
                .where(
                    SessionRecord.token_digest == token_digest,
                    SessionRecord.revoked_at.is_(None),
                    SessionRecord.expires_at > now,
                )
                .values(revoked_at=now)
            )
            return result.rowcount == 1

    def extend(self, token_digest: str, expires_at: datetime) -> None:
        with unit_of_work_scope(self._session_factory, "extend_session") as db:
            db.execute(
                update(SessionRecord)
                .where(
                    SessionRecord.token_digest == token_digest,
                    SessionRecord.revoked_at.is_(None),
                )
                .values(expires_at=expires_at)
            )

    def purge(self, now: datetime) -> int:
        with unit_of_work_scope(self._session_factory, "purge_sessions") as db:
            result = db.execute(
                delete(SessionRecord).where(
                    or_(SessionRecord.expires_at <= now, SessionRecord.revoked_at.is_not(None))
                )
            )
            return result.rowcount or 0
