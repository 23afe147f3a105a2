# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .entities import AccountRecord, Session


class CredentialStore(Protocol):
    def create_account(self, username: str, email: str, password_hash: str) -> AccountRecord: ...
    def find_by_username(self, username: str) -> AccountRecord | None: ...
    def find_by_id(self, account_id: int) -> AccountRecord | None: ...


class SessionStore(Protocol):
    def add(self, session: Session) -> None: ...
    def get(self, token_digest: str) -> Session | None: ...
    def revoke(self, token_digest: str, now: datetime) -> bool: ...
    def extend(self, token_digest: str, expires_at: datetime) -> None: ...
    def purge(self, now: datetime) -> int: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...


class Clock(Protocol):
    def now(self) -> datetime: ...
