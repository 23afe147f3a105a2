# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from authcore.infrastructure.db.models import AuditLog
from authcore.shared.logging import logger


class AuditAction(str, Enum):
    REGISTER = "register"
    REGISTER_REJECTED = "register_rejected"
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGIN_LOCKED = "login_locked"
    LOGOUT = "logout"
    SESSION_REVOKED = "session_revoked"
    SESSIONS_PURGED = "sessions_purged"


_SENSITIVE_KEYS = {"password", "token", "hash", "secret", "key", "cookie"}


def _sanitize_details(details: dict[str, Any]) -> dict[str, Any]:
    sanitized = {}
    for key, value in details.items():
        key_lower = key.lower()
        if any(sensitive in key_lower for sensitive in _SENSITIVE_KEYS):
            sanitized[key] = "***REDACTED***"
        else:
            sanitized[key] = value
    return sanitized


class AuditLogger:
    """Writes audit events to the log and, when a session factory is given, to ``audit_logs``."""

    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        self._session_factory = session_factory

    def log(
        self,
        action: AuditAction,
        account_id: int | None = None,
        ip_address: str | None = None,
        details: dict[str, Any] | None = None,
        success: bool = True,
    ) -> None:
        safe_details = _sanitize_details(details) if details else {}

        log_message = (
            f"AUDIT: {action.value} | "
            f"account_id={account_id} | "
            f"ip={ip_address} | "
            f"success={success}"
        )
        if safe_details:
            log_message += f" | details={safe_details}"

        if success:
            logger.info(log_message)
        else:
            logger.warning(log_message)

        if self._session_factory is not None:
            self._store(action, account_id, ip_address, success, safe_details)

    def _store(
        self,
        action: AuditAction,
        account_id: int | None,
        ip_address: str | None,
        success: bool,
        details: dict[str, Any],
    ) -> None:
        assert self._session_factory is not None
        db = self._session_factory()
        try:
            db.add(
                AuditLog(
                    timestamp=datetime.now(UTC),
                    action=action.value,
                    account_id=account_id,
                    ip_address=ip_address,
                    success=success,
                    details_json=json.dumps(details, default=str) if details else None,
                )
            )
            db.commit()
        except SQLAlchemyError as db_error:
            # An audit write must never fail the request it describes.
            db.rollback()
            logger.warning(f"Failed to store audit log in database: {type(db_error).__name__}")
        finally:
            db.close()


__all__ = ["AuditAction", "AuditLogger"]
