"""
Password hashing utilities using bcrypt.
"""

from functools import lru_cache

import bcrypt

# Work factor for new hashes; existing hashes with another cost get upgraded on login
BCRYPT_ROUNDS = 12

# bcrypt only reads the first 72 bytes of its input
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class PasswordHasher:
    """Salted one-way hashing of account passwords."""

    @staticmethod
    def hash(password: str) -> str:
        """
        Hash a password with a fresh salt.

        Args:
            password: Plain text password

        Returns:
            bcrypt hash string ($2b$...)
        """
        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        return bcrypt.hashpw(_encode(password), salt).decode("utf-8")

    @staticmethod
    def verify(plain_password: str, hashed_password: str) -> bool:
        """
        Check a password against a stored hash.

        A malformed stored hash counts as a mismatch.
        """
        try:
            return bcrypt.checkpw(_encode(plain_password), hashed_password.encode("utf-8"))
        except ValueError:
            return False

    @staticmethod
    def needs_rehash(hashed_password: str) -> bool:
        """
        Whether a stored hash was produced with a different cost factor.

        Format: $2b$<rounds>$<salt+digest>
        """
        parts = hashed_password.split("$")
        if len(parts) < 4 or not parts[2].isdigit():
            return True
        return int(parts[2]) != BCRYPT_ROUNDS


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return PasswordHasher.hash("timing-equalizer")


def burn_password_check(plain_password: str) -> None:
    """
    Spend the same bcrypt work as a real check.

    Called for unknown accounts so response time does not reveal whether an
    email is registered.
    """
    PasswordHasher.verify(plain_password, _dummy_hash())


def hash_password(password: str) -> str:
    """Hash a password."""
    return PasswordHasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password."""
    return PasswordHasher.verify(plain_password, hashed_password)
