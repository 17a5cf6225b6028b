"""Password hashing for the credential store.

Argon2id with fixed work factors. Hashing fails closed: any error raises
HashError and the caller must not persist anything.
"""

from typing import Optional

from argon2 import PasswordHasher as Argon2Hasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError

from sanato.core.constants import HASH_MEMORY_COST, HASH_PARALLELISM, HASH_TIME_COST
from sanato.core.errors import HashError


class PasswordHasher:
    """One-way password hashing and verification."""

    def __init__(
        self,
        time_cost: int = HASH_TIME_COST,
        memory_cost: int = HASH_MEMORY_COST,
        parallelism: int = HASH_PARALLELISM,
    ):
        self._hasher = Argon2Hasher(
            time_cost=time_cost, memory_cost=memory_cost, parallelism=parallelism
        )

    def hash(self, password: str) -> str:
        """Hash a plaintext password.

        Args:
            password: Plaintext password

        Returns:
            Encoded Argon2id hash

        Raises:
            HashError: If hashing fails
        """
        if not isinstance(password, str):
            raise HashError("Password must be a string")
        try:
            return self._hasher.hash(password)
        except HashingError as e:
            raise HashError(f"Password hashing failed: {e}")

    def verify(self, hashed: Optional[str], password: str) -> bool:
        """Check a plaintext password against a stored hash.

        A malformed or missing hash never verifies.
        """
        if not hashed:
            return False
        try:
            return self._hasher.verify(hashed, password)
        except (VerificationError, InvalidHashError):
            return False


_default_hasher: Optional[PasswordHasher] = None


def default_hasher() -> PasswordHasher:
    """Return the shared hasher with the standard work factors."""
    global _default_hasher
    if _default_hasher is None:
        _default_hasher = PasswordHasher()
    return _default_hasher


def verify_password(hashed: Optional[str], password: str) -> bool:
    """Check a plaintext password against a stored hash."""
    return default_hasher().verify(hashed, password)
