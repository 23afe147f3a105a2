from __future__ import annotations

import pytest

from authcore.application.services import password_hashing
from authcore.application.services.password_hashing import WerkzeugPasswordHasher
from authcore.domain.accounts.exceptions import HashingError


@pytest.fixture()
def hasher() -> WerkzeugPasswordHasher:
    return WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")


def test_hash_then_verify(hasher: WerkzeugPasswordHasher) -> None:
    hashed = hasher.hash("s3cret1")

    assert hashed != "s3cret1"
    assert hasher.verify("s3cret1", hashed) is True
    assert hasher.verify("s3cret2", hashed) is False


def test_hashes_are_salted(hasher: WerkzeugPasswordHasher) -> None:
    assert hasher.hash("same") != hasher.hash("same")


def test_default_method_is_scrypt() -> None:
    hashed = WerkzeugPasswordHasher().hash("s3cret1")

    assert hashed.startswith("scrypt:")
    assert WerkzeugPasswordHasher().verify("s3cret1", hashed)


@pytest.mark.parametrize("stored", ["", "plain-text", "unknown:method$salt$hash"])
def test_verify_malformed_hash_is_false(hasher: WerkzeugPasswordHasher, stored: str) -> None:
    assert hasher.verify("s3cret1", stored) is False


def test_hash_failure_is_infrastructure_error(
    hasher: WerkzeugPasswordHasher, monkeypatch: pytest.MonkeyPatch
) -> None:
    def broken(*args, **kwargs):
        raise NotImplementedError("no entropy")

    monkeypatch.setattr(password_hashing, "generate_password_hash", broken)

    with pytest.raises(HashingError) as exc_info:
        hasher.hash("s3cret1")
    assert exc_info.value.status == 500
    assert exc_info.value.to_dict() == {"error": "internal_error"}
