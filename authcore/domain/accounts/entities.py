# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from authcore.domain.exceptions import InvariantViolation


@dataclass(slots=True, frozen=True)
class Account:
    """Public view of an account. Carries no credential material."""

    id: int
    username: str
    email: str
    created_at: datetime


@dataclass(slots=True, frozen=True)
class AccountRecord:
    """Stored account including its password hash; never leaves the service layer."""

    id: int
    username: str
    email: str
    password_hash: str = field(repr=False)
    created_at: datetime

    def to_account(self) -> Account:
        return Account(
            id=self.id,
            username=self.username,
            email=self.email,
            created_at=self.created_at,
        )


class SessionState(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"


@dataclass(slots=True, frozen=True)
class Session:
    token_digest: str = field(repr=False)
    account_id: int
    issued_at: datetime
    expires_at: datetime
    revoked_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.expires_at <= self.issued_at:
            raise InvariantViolation("must be later than issued_at", field="expires_at")

    def state(self, now: datetime) -> SessionState:
        if self.revoked_at is not None:
            return SessionState.REVOKED
        if now >= self.expires_at:
            return SessionState.EXPIRED
        return SessionState.ACTIVE

    def is_active(self, now: datetime) -> bool:
        return self.state(now) is SessionState.ACTIVE
