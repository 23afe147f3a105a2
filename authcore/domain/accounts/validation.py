# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Registration input rules, applied before any hashing or storage call."""

from __future__ import annotations

import re

from authcore.shared.errors.base import ValidationError
from authcore.shared.errors.validation import format_field_errors
from authcore.shared.errors.validation_types import ValidationErrorType

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 64
EMAIL_MAX_LENGTH = 254
PASSWORD_MAX_LENGTH = 128

_USERNAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_.\-]*$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$")


def normalize_username(value: str) -> str:
    return (value or "").strip()


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def _username_errors(username: str) -> list[str]:
    if not username:
        return [ValidationErrorType.MISSING]
    if len(username) < USERNAME_MIN_LENGTH:
        return [ValidationErrorType.USERNAME_TOO_SHORT]
    if len(username) > USERNAME_MAX_LENGTH:
        return [ValidationErrorType.USERNAME_TOO_LONG]
    if not _USERNAME_RE.match(username):
        return [ValidationErrorType.USERNAME_INVALID_CHARS]
    return []


def _email_errors(email: str) -> list[str]:
    if not email:
        return [ValidationErrorType.MISSING]
    if len(email) > EMAIL_MAX_LENGTH:
        return [ValidationErrorType.EMAIL_TOO_LONG]
    if not _EMAIL_RE.match(email):
        return [ValidationErrorType.EMAIL_INVALID]
    return []


def _password_errors(password: str, min_length: int) -> list[str]:
    if not password:
        return [ValidationErrorType.MISSING]
    if len(password) < min_length:
        return [ValidationErrorType.PASSWORD_TOO_SHORT]
    if len(password) > PASSWORD_MAX_LENGTH:
        return [ValidationErrorType.PASSWORD_TOO_LONG]
    return []


def validate_registration(
    username: str, email: str, password: str, *, min_password_length: int
) -> tuple[str, str]:
    """Return the normalized ``(username, email)`` or raise ``ValidationError``.

    All three fields are checked so the caller gets every problem at once.
    """
    username = normalize_username(username)
    email = normalize_email(email)

    errors: list[tuple[str, str]] = []
    errors.extend(("username", kind) for kind in _username_errors(username))
    errors.extend(("email", kind) for kind in _email_errors(email))
    errors.extend(("password", kind) for kind in _password_errors(password, min_password_length))

    if errors:
        raise ValidationError(context=format_field_errors(errors))
    return username, email
