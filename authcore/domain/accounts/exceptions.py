# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from authcore.shared.errors.base import DomainError, InfrastructureError


class DuplicateAccountError(DomainError):
    code = "duplicate_account"
    status = HTTPStatus.CONFLICT

    def __init__(self, field: str | None = None) -> None:
        super().__init__(context={"field": field} if field else None)
        self.field = field


class InvalidCredentialsError(DomainError):
    code = "invalid_credentials"
    status = HTTPStatus.UNAUTHORIZED


class UnauthorizedError(DomainError):
    code = "unauthorized"
    status = HTTPStatus.UNAUTHORIZED


class AccountLockedError(DomainError):
    code = "account_locked"
    status = HTTPStatus.TOO_MANY_REQUESTS

    def __init__(self, lockout_remaining: float = 0) -> None:
        super().__init__(
            context={"lockout_remaining_seconds": round(lockout_remaining, 1)},
        )


class HashingError(InfrastructureError):
    def __init__(self) -> None:
        super().__init__(code="hashing_error")


DuplicateError = DuplicateAccountError
InvalidCredentials = InvalidCredentialsError
Unauthorized = UnauthorizedError
