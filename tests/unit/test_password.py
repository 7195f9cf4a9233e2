"""Unit tests for password hashing."""

import bcrypt

from jobportal.kernel.identity.password import (
    BCRYPT_ROUNDS,
    PasswordHasher,
    burn_password_check,
    hash_password,
    verify_password,
)


class TestPasswordHasher:
    """Tests for PasswordHasher."""

    def test_hash_creates_different_hashes(self):
        """Same password should create different hashes (due to salt)."""
        password = "TestPassword123"
        hash1 = PasswordHasher.hash(password)
        hash2 = PasswordHasher.hash(password)

        assert hash1 != hash2
        assert hash1.startswith(f"$2b${BCRYPT_ROUNDS}$")

    def test_hash_is_not_plaintext(self):
        hashed = PasswordHasher.hash("TestPassword123")
        assert "TestPassword123" not in hashed

    def test_verify_correct_password(self):
        password = "TestPassword123"
        hashed = PasswordHasher.hash(password)

        assert PasswordHasher.verify(password, hashed) is True

    def test_verify_wrong_password(self):
        hashed = PasswordHasher.hash("TestPassword123")

        assert PasswordHasher.verify("WrongPassword", hashed) is False

    def test_verify_malformed_hash_is_mismatch(self):
        assert PasswordHasher.verify("anything", "not-a-bcrypt-hash") is False

    def test_needs_rehash_for_other_cost(self):
        """Hashes made with a lower work factor get flagged for upgrade."""
        weak = bcrypt.hashpw(b"TestPassword123", bcrypt.gensalt(rounds=4)).decode()

        assert PasswordHasher.needs_rehash(weak) is True
        assert PasswordHasher.needs_rehash(PasswordHasher.hash("x" * 8)) is False

    def test_long_passwords_use_first_72_bytes(self):
        base = "a" * 72
        hashed = PasswordHasher.hash(base + "tail-one")

        assert PasswordHasher.verify(base + "tail-two", hashed) is True

    def test_burn_password_check_returns_nothing(self):
        assert burn_password_check("whatever") is None

    def test_convenience_functions(self):
        """Test hash_password and verify_password functions."""
        password = "TestPassword123"
        hashed = hash_password(password)

        assert verify_password(password, hashed) is True
        assert verify_password("wrong", hashed) is False
