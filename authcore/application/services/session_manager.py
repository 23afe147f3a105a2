# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import hashlib
import secrets
from collections.abc import Callable
from datetime import timedelta

from authcore.domain.accounts.entities import Session, SessionState
from authcore.domain.accounts.repositories import Clock, SessionStore
from authcore.shared.errors import InfrastructureError
from authcore.shared.logging import logger

DEFAULT_TTL = timedelta(hours=24)
TOKEN_BYTES = 32
MAX_TOKEN_LENGTH = 512


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def token_digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class SessionManager:
    """Issues, validates and revokes opaque session tokens.

    Only the SHA-256 digest of a token reaches the store. Expiry is lazy: an
    expired session is rejected on lookup whether or not it has been purged.
    """

    def __init__(
        self,
        *,
        store: SessionStore,
        clock: Clock,
        ttl: timedelta = DEFAULT_TTL,
        sliding: bool = False,
        token_factory: Callable[[], str] = generate_token,
    ) -> None:
        if ttl <= timedelta(0):
            raise ValueError("session ttl must be positive")
        self._store = store
        self._clock = clock
        self._ttl = ttl
        self._sliding = sliding
        self._token_factory = token_factory

    def create(self, account_id: int) -> str:
        try:
            token = self._token_factory()
        except (NotImplementedError, OSError) as exc:
            logger.error(f"sessions: random source unavailable ({type(exc).__name__})")
            raise InfrastructureError("token_source_unavailable") from exc

        issued_at = self._clock.now()
        digest = token_digest(token)
        self._store.add(
            Session(
                token_digest=digest,
                account_id=account_id,
                issued_at=issued_at,
                expires_at=issued_at + self._ttl,
            )
        )
        logger.info(f"sessions: issued account_id={account_id} sid={digest[:8]}")
        return token

    def validate(self, token: str) -> int | None:
        if not token or len(token) > MAX_TOKEN_LENGTH:
            return None

        digest = token_digest(token)
        session = self._store.get(digest)
        if session is None:
            logger.debug(f"sessions: unknown sid={digest[:8]}")
            return None

        now = self._clock.now()
        state = session.state(now)
        if state is not SessionState.ACTIVE:
            logger.debug(f"sessions: rejected sid={digest[:8]} state={state.value}")
            return None

        if self._sliding:
            self._store.extend(digest, now + self._ttl)
        return session.account_id

    def revoke(self, token: str) -> bool:
        if not token or len(token) > MAX_TOKEN_LENGTH:
            return False
        digest = token_digest(token)
        revoked = self._store.revoke(digest, self._clock.now())
        if revoked:
            logger.info(f"sessions: revoked sid={digest[:8]}")
        else:
            logger.debug(f"sessions: revoke ignored sid={digest[:8]} (unknown or inactive)")
        return revoked

    def purge_expired(self) -> int:
        removed = self._store.purge(self._clock.now())
        logger.info(f"sessions: purged {removed} inactive sessions")
        return removed
