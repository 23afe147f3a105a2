# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import timedelta
from functools import cached_property

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from authcore.application.services.account_service import AccountService
from authcore.application.services.password_hashing import WerkzeugPasswordHasher
from authcore.application.services.session_manager import SessionManager
from authcore.domain.accounts.repositories import Clock, SessionStore
from authcore.infrastructure.audit import AuditLogger
from authcore.infrastructure.auth.login_attempts import LoginAttemptsTracker
from authcore.infrastructure.clock import SystemClock
from authcore.infrastructure.db import create_db_engine, create_session_factory
from authcore.infrastructure.repositories.accounts.sqlalchemy_account_repository import (
    SqlAlchemyCredentialStore,
)
from authcore.infrastructure.repositories.sessions.memory_session_store import (
    InMemorySessionStore,
)
from authcore.infrastructure.repositories.sessions.sqlalchemy_session_store import (
    SqlAlchemySessionStore,
)
from authcore.interfaces.http.controllers.auth_controller import AuthController
from authcore.interfaces.http.controllers.misc_controller import MiscController
from authcore.shared.config import AppConfig
from authcore.shared.middleware.rate_limit import InMemoryRateLimiter


class Container:
    def __init__(self, config: AppConfig, *, clock: Clock | None = None) -> None:
        self.config = config
        self._clock = clock

    @cached_property
    def engine(self) -> Engine:
        return create_db_engine(self.config.database)

    @cached_property
    def session_factory(self) -> sessionmaker[Session]:
        return create_session_factory(self.engine)

    @cached_property
    def clock(self) -> Clock:
        return self._clock or SystemClock()

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher(
            method=self.config.password.hash_method,
            salt_length=self.config.password.salt_length,
        )

    @cached_property
    def credential_store(self) -> SqlAlchemyCredentialStore:
        return SqlAlchemyCredentialStore(self.session_factory)

    @cached_property
    def session_store(self) -> SessionStore:
        if self.config.session.backend == "memory":
            return InMemorySessionStore()
        return SqlAlchemySessionStore(self.session_factory)

    @cached_property
    def session_manager(self) -> SessionManager:
        return SessionManager(
            store=self.session_store,
            clock=self.clock,
            ttl=timedelta(seconds=self.config.session.ttl_seconds),
            sliding=self.config.session.sliding,
        )

    @cached_property
    def login_attempts(self) -> LoginAttemptsTracker | None:
        security = self.config.security
        if not security.login_lockout_enabled:
            return None
        return LoginAttemptsTracker(
            max_attempts=security.login_max_attempts,
            lockout_seconds=security.login_lockout_seconds,
            attempt_window=security.login_attempt_window,
        )

    @cached_property
    def audit_logger(self) -> AuditLogger:
        return AuditLogger(self.session_factory)

    @cached_property
    def account_service(self) -> AccountService:
        return AccountService(
            accounts=self.credential_store,
            sessions=self.session_manager,
            password_hasher=self.password_hasher,
            audit=self.audit_logger,
            login_attempts=self.login_attempts,
            min_password_length=self.config.password.min_length,
        )

    @cached_property
    def rate_limiter(self) -> InMemoryRateLimiter | None:
        security = self.config.security
        if not security.enable_rate_limit:
            return None
        return InMemoryRateLimiter(security.rate_limit_requests, security.rate_limit_window)

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            account_service=self.account_service,
            session_config=self.config.session,
            security_config=self.config.security,
            rate_limiter=self.rate_limiter,
        )

    @cached_property
    def misc_controller(self) -> MiscController:
        return MiscController(engine=self.engine)

    def dispose(self) -> None:
        if "engine" in self.__dict__:
            self.engine.dispose()
