"""Unit tests for one-time secrets and session tokens."""

import uuid

from jose import jwt

from jobportal.kernel.identity.errors import AuthErrorKind
from jobportal.kernel.identity.tokens import SecretStatus, TokenIssuer


class TestVerificationCodes:

    def test_code_is_six_digits_in_range(self, issuer: TokenIssuer):
        for _ in range(50):
            secret = issuer.issue_verification_code()
            assert len(secret.raw) == 6
            assert 100000 <= int(secret.raw) <= 999999

    def test_only_digest_differs_from_raw(self, issuer: TokenIssuer):
        secret = issuer.issue_verification_code()

        assert secret.digest != secret.raw
        assert secret.digest == TokenIssuer.hash_secret(secret.raw)
        assert len(secret.digest) == 64

    def test_code_expires_after_ten_minutes(self, issuer: TokenIssuer, clock):
        secret = issuer.issue_verification_code()

        assert secret.expires_at == clock() + issuer.verification_code_ttl
        assert issuer.verification_code_ttl.total_seconds() == 600


class TestResetTokens:

    def test_token_is_forty_hex_chars(self, issuer: TokenIssuer):
        secret = issuer.issue_reset_token()

        assert len(secret.raw) == 40
        int(secret.raw, 16)

    def test_tokens_are_unique(self, issuer: TokenIssuer):
        assert issuer.issue_reset_token().raw != issuer.issue_reset_token().raw

    def test_token_lifetime_is_thirty_minutes(self, issuer: TokenIssuer, clock):
        secret = issuer.issue_reset_token()

        assert secret.expires_at == clock() + issuer.reset_token_ttl
        assert issuer.reset_token_ttl.total_seconds() == 1800


class TestCheckSecret:

    def test_valid(self, issuer: TokenIssuer):
        secret = issuer.issue_verification_code()

        assert issuer.check_secret(secret.raw, secret.digest, secret.expires_at) is SecretStatus.VALID

    def test_wrong_secret_is_invalid(self, issuer: TokenIssuer):
        secret = issuer.issue_verification_code()
        wrong = "100000" if secret.raw != "100000" else "100001"

        assert issuer.check_secret(wrong, secret.digest, secret.expires_at) is SecretStatus.INVALID

    def test_nothing_pending_is_invalid(self, issuer: TokenIssuer):
        assert issuer.check_secret("123456", None, None) is SecretStatus.INVALID

    def test_expired_exactly_at_deadline(self, issuer: TokenIssuer, clock):
        secret = issuer.issue_verification_code()
        clock.advance(minutes=10)

        assert issuer.check_secret(secret.raw, secret.digest, secret.expires_at) is SecretStatus.EXPIRED

    def test_naive_expiry_treated_as_utc(self, issuer: TokenIssuer):
        secret = issuer.issue_reset_token()
        naive = secret.expires_at.replace(tzinfo=None)

        assert issuer.check_secret(secret.raw, secret.digest, naive) is SecretStatus.VALID


class TestSessionTokens:

    def test_round_trip_claims(self, issuer: TokenIssuer):
        account_id = uuid.uuid4()
        session = issuer.create_session_token(account_id, "employer")

        result = issuer.verify_session_token(session.token)

        assert result.ok
        assert result.value.account_id == account_id
        assert result.value.role == "employer"
        assert result.value.expires_at == session.expires_at.replace(microsecond=0)

    def test_payload_carries_id_role_and_type(self, issuer: TokenIssuer, settings):
        account_id = uuid.uuid4()
        session = issuer.create_session_token(account_id, "candidate")

        payload = jwt.get_unverified_claims(session.token)

        assert payload["sub"] == str(account_id)
        assert payload["id"] == str(account_id)
        assert payload["role"] == "candidate"
        assert payload["type"] == "session"
        assert payload["exp"] - payload["iat"] == 7 * 24 * 3600

    def test_expired_after_seven_days(self, issuer: TokenIssuer, clock):
        session = issuer.create_session_token(uuid.uuid4(), "candidate")
        clock.advance(days=7)

        result = issuer.verify_session_token(session.token)

        assert result.error.kind is AuthErrorKind.SESSION_EXPIRED

    def test_still_valid_just_before_expiry(self, issuer: TokenIssuer, clock):
        session = issuer.create_session_token(uuid.uuid4(), "candidate")
        clock.advance(days=7, seconds=-1)

        assert issuer.verify_session_token(session.token).ok

    def test_wrong_key_is_invalid_signature(self, issuer: TokenIssuer, clock):
        other = TokenIssuer(secret_key="another-key", clock=clock)
        session = other.create_session_token(uuid.uuid4(), "candidate")

        result = issuer.verify_session_token(session.token)

        assert result.error.kind is AuthErrorKind.INVALID_SIGNATURE

    def test_garbage_is_invalid_signature(self, issuer: TokenIssuer):
        result = issuer.verify_session_token("not.a.jwt")

        assert result.error.kind is AuthErrorKind.INVALID_SIGNATURE

    def test_token_without_session_type_rejected(self, issuer: TokenIssuer, settings):
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "role": "candidate", "iat": 0, "exp": 9999999999},
            settings.secret_key,
            algorithm=settings.algorithm,
        )

        result = issuer.verify_session_token(token)

        assert result.error.kind is AuthErrorKind.INVALID_SIGNATURE
