# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
from typing import NoReturn

from authcore.application.services.session_manager import SessionManager
from authcore.domain.accounts.entities import Account
from authcore.domain.accounts.exceptions import (
    AccountLockedError,
    DuplicateAccountError,
    InvalidCredentialsError,
    UnauthorizedError,
)
from authcore.domain.accounts.repositories import CredentialStore, PasswordHasher
from authcore.domain.accounts.validation import normalize_username, validate_registration
from authcore.infrastructure.audit import AuditAction, AuditLogger
from authcore.infrastructure.auth.login_attempts import LoginAttemptsTracker
from authcore.shared.logging import logger


class AccountService:
    def __init__(
        self,
        *,
        accounts: CredentialStore,
        sessions: SessionManager,
        password_hasher: PasswordHasher,
        audit: AuditLogger,
        login_attempts: LoginAttemptsTracker | None = None,
        min_password_length: int = 6,
    ) -> None:
        self._accounts = accounts
        self._sessions = sessions
        self._password_hasher = password_hasher
        self._audit = audit
        self._login_attempts = login_attempts
        self._min_password_length = min_password_length
        # Verified against when the username is unknown so both paths cost one hash check.
        self._dummy_hash = password_hasher.hash(secrets.token_urlsafe(16))

    def register(
        self, username: str, email: str, password: str, ip_address: str | None = None
    ) -> Account:
        username, email = validate_registration(
            username, email, password, min_password_length=self._min_password_length
        )
        hashed = self._password_hasher.hash(password)
        try:
            record = self._accounts.create_account(username, email, hashed)
        except DuplicateAccountError as exc:
            self._audit.log(
                AuditAction.REGISTER_REJECTED,
                ip_address=ip_address,
                details={"username": username, "field": exc.field},
                success=False,
            )
            raise

        self._audit.log(
            AuditAction.REGISTER,
            account_id=record.id,
            ip_address=ip_address,
            details={"username": username},
        )
        logger.info(f"accounts.register: ok account_id={record.id}")
        return record.to_account()

    def authenticate(
        self, username: str, password: str, ip_address: str | None = None
    ) -> tuple[Account, str]:
        username = normalize_username(username)
        self._ensure_not_locked(username, ip_address)

        record = self._accounts.find_by_username(username) if username else None
        if record is None:
            self._password_hasher.verify(password, self._dummy_hash)
            self._reject_login(username, ip_address)
        elif not self._password_hasher.verify(password, record.password_hash):
            self._reject_login(username, ip_address)

        if self._login_attempts is not None:
            self._login_attempts.record_attempt(username, success=True, ip_address=ip_address)

        token = self._sessions.create(record.id)
        self._audit.log(AuditAction.LOGIN_SUCCESS, account_id=record.id, ip_address=ip_address)
        return record.to_account(), token

    def get_profile(self, token: str) -> Account:
        account_id = self._sessions.validate(token)
        if account_id is None:
            raise UnauthorizedError()

        record = self._accounts.find_by_id(account_id)
        if record is None:
            logger.warning(f"accounts.profile: session bound to missing account_id={account_id}")
            raise UnauthorizedError()
        return record.to_account()

    def logout(self, token: str, ip_address: str | None = None) -> None:
        revoked = self._sessions.revoke(token) if token else False
        action = AuditAction.SESSION_REVOKED if revoked else AuditAction.LOGOUT
        self._audit.log(action, ip_address=ip_address, details={"had_session": revoked})

    def purge_sessions(self) -> int:
        removed = self._sessions.purge_expired()
        self._audit.log(AuditAction.SESSIONS_PURGED, details={"removed": removed})
        return removed

    def _reject_login(self, username: str, ip_address: str | None) -> NoReturn:
        if self._login_attempts is not None:
            self._login_attempts.record_attempt(username, success=False, ip_address=ip_address)
        self._audit.log(
            AuditAction.LOGIN_FAILED,
            ip_address=ip_address,
            details={"username": username},
            success=False,
        )
        raise InvalidCredentialsError()

    def _ensure_not_locked(self, username: str, ip_address: str | None) -> None:
        if self._login_attempts is None:
            return
        remaining = self._login_attempts.get_lockout_remaining(username)
        if remaining > 0:
            self._audit.log(
                AuditAction.LOGIN_LOCKED,
                ip_address=ip_address,
                details={"username": username},
                success=False,
            )
            raise AccountLockedError(lockout_remaining=remaining)
