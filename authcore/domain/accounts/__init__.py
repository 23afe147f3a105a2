# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import Account, AccountRecord, Session, SessionState
from .exceptions import (
    AccountLockedError,
    DuplicateAccountError,
    DuplicateError,
    HashingError,
    InvalidCredentials,
    InvalidCredentialsError,
    Unauthorized,
    UnauthorizedError,
)
from .repositories import Clock, CredentialStore, PasswordHasher, SessionStore

__all__ = [
    "Account",
    "AccountLockedError",
    "AccountRecord",
    "Clock",
    "CredentialStore",
    "DuplicateAccountError",
    "DuplicateError",
    "HashingError",
    "InvalidCredentials",
    "InvalidCredentialsError",
    "PasswordHasher",
    "Session",
    "SessionState",
    "SessionStore",
    "Unauthorized",
    "UnauthorizedError",
]
