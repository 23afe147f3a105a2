"""Password hashing strategies."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from authcore.domain.accounts.exceptions import HashingError
from authcore.domain.accounts.repositories import PasswordHasher
from authcore.shared.logging import logger


class WerkzeugPasswordHasher(PasswordHasher):
    """Salted hashes in werkzeug's ``method$salt$hash`` format.

    The salt and cost parameters travel inside the hash string, so changing
    ``method`` only affects newly created hashes.
    """

    def __init__(self, method: str = "scrypt", salt_length: int = 16) -> None:
        self._method = method
        self._salt_length = salt_length

    def hash(self, password: str) -> str:
        try:
            return str(
                generate_password_hash(
                    password, method=self._method, salt_length=self._salt_length
                )
            )
        except (NotImplementedError, OSError, ValueError) as exc:
            logger.error(f"password_hasher: hashing failed ({type(exc).__name__})")
            raise HashingError() from exc

    def verify(self, password: str, hashed: str) -> bool:
        if not hashed:
            return False
        try:
            return bool(check_password_hash(hashed, password))
        except ValueError:
            logger.warning("password_hasher: stored hash is malformed")
            return False
