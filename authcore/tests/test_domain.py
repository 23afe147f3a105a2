from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from authcore.domain import InvariantViolation
from authcore.domain.accounts.entities import AccountRecord, Session, SessionState
from authcore.domain.accounts.validation import (
    normalize_email,
    normalize_username,
    validate_registration,
)
from authcore.shared.errors import ValidationError
from authcore.shared.errors.validation_types import ValidationErrorType

T0 = datetime(2026, 1, 1, tzinfo=UTC)


def test_session_states() -> None:
    session = Session(
        token_digest="d", account_id=1, issued_at=T0, expires_at=T0 + timedelta(hours=1)
    )

    assert session.state(T0) is SessionState.ACTIVE
    assert session.state(T0 + timedelta(minutes=59)) is SessionState.ACTIVE
    assert session.state(T0 + timedelta(hours=1)) is SessionState.EXPIRED
    assert not session.is_active(T0 + timedelta(hours=2))


def test_revoked_wins_over_expired() -> None:
    session = Session(
        token_digest="d",
        account_id=1,
        issued_at=T0,
        expires_at=T0 + timedelta(hours=1),
        revoked_at=T0,
    )

    assert session.state(T0 + timedelta(hours=2)) is SessionState.REVOKED


def test_session_requires_expiry_after_issue() -> None:
    with pytest.raises(InvariantViolation) as exc_info:
        Session(token_digest="d", account_id=1, issued_at=T0, expires_at=T0)
    assert exc_info.value.field == "expires_at"


def test_session_repr_hides_digest() -> None:
    session = Session(
        token_digest="abc123digest", account_id=1, issued_at=T0, expires_at=T0 + timedelta(1)
    )
    assert "abc123digest" not in repr(session)


def test_record_to_account_drops_hash() -> None:
    record = AccountRecord(
        id=7, username="alice", email="a@x.com", password_hash="scrypt:x", created_at=T0
    )

    account = record.to_account()

    assert (account.id, account.username, account.email) == (7, "alice", "a@x.com")
    assert "scrypt" not in repr(record)


def test_normalization() -> None:
    assert normalize_username("  alice ") == "alice"
    assert normalize_email(" Alice@Example.COM ") == "alice@example.com"


def test_validate_registration_returns_normalized_values() -> None:
    assert validate_registration(
        " alice ", "A@X.com", "s3cret1", min_password_length=6
    ) == ("alice", "a@x.com")


@pytest.mark.parametrize(
    ("username", "email", "password", "expected"),
    [
        ("", "a@x.com", "s3cret1", ("username", ValidationErrorType.MISSING)),
        ("ab", "a@x.com", "s3cret1", ("username", ValidationErrorType.USERNAME_TOO_SHORT)),
        ("a" * 65, "a@x.com", "s3cret1", ("username", ValidationErrorType.USERNAME_TOO_LONG)),
        ("al ice", "a@x.com", "s3cret1", ("username", ValidationErrorType.USERNAME_INVALID_CHARS)),
        ("alice", "a@x", "s3cret1", ("email", ValidationErrorType.EMAIL_INVALID)),
        ("alice", "a" * 250 + "@x.com", "s3cret1", ("email", ValidationErrorType.EMAIL_TOO_LONG)),
        ("alice", "a@x.com", "12345", ("password", ValidationErrorType.PASSWORD_TOO_SHORT)),
        ("alice", "a@x.com", "p" * 129, ("password", ValidationErrorType.PASSWORD_TOO_LONG)),
    ],
)
def test_validate_registration_errors(
    username: str, email: str, password: str, expected: tuple[str, str]
) -> None:
    with pytest.raises(ValidationError) as exc_info:
        validate_registration(username, email, password, min_password_length=6)

    field, kind = expected
    assert exc_info.value.status == 400
    assert {"field": field, "type": kind} in exc_info.value.context["errors"]
