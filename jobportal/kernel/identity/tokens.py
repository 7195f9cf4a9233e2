"""
One-time secrets and signed session tokens.

Two kinds of one-time secret are issued:

- verification codes: 6 decimal digits, short-lived, sent by email
- reset tokens: 20 random bytes as 40 hex characters, sent as a link

Only the SHA-256 digest of either is persisted. Session tokens are HS256
JWTs carrying the account id and role.
"""

import hashlib
import hmac
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

from jose import JWTError, jwt
from pydantic import BaseModel

from jobportal.config import Settings
from jobportal.kernel.identity.errors import AuthErrorKind, AuthResult
from jobportal.kernel.models.base import as_utc

Clock = Callable[[], datetime]

SESSION_TOKEN_TYPE = "session"
RESET_TOKEN_BYTES = 20


def _system_clock() -> datetime:
    return datetime.now(timezone.utc)


class SecretStatus(str, Enum):
    """Outcome of checking a presented one-time secret."""
    VALID = "valid"
    INVALID = "invalid"
    EXPIRED = "expired"


@dataclass(frozen=True)
class IssuedSecret:
    """A freshly generated one-time secret."""

    raw: str  # goes to the account holder only
    digest: str  # goes to the database
    expires_at: datetime


@dataclass(frozen=True)
class SessionToken:
    token: str
    expires_at: datetime


class SessionClaims(BaseModel):
    """Decoded session token payload."""

    account_id: uuid.UUID
    role: str
    issued_at: datetime
    expires_at: datetime


class TokenIssuer:
    """
    Creates and checks one-time secrets and session tokens.

    Stateless apart from the configured key, lifetimes and clock.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        session_token_expire_days: int = 7,
        verification_code_expire_minutes: int = 10,
        reset_token_expire_minutes: int = 30,
        clock: Optional[Clock] = None,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.session_ttl = timedelta(days=session_token_expire_days)
        self.verification_code_ttl = timedelta(minutes=verification_code_expire_minutes)
        self.reset_token_ttl = timedelta(minutes=reset_token_expire_minutes)
        self._clock = clock or _system_clock

    @classmethod
    def from_settings(cls, settings: Settings, clock: Optional[Clock] = None) -> "TokenIssuer":
        return cls(
            secret_key=settings.secret_key,
            algorithm=settings.algorithm,
            session_token_expire_days=settings.session_token_expire_days,
            verification_code_expire_minutes=settings.verification_code_expire_minutes,
            reset_token_expire_minutes=settings.reset_token_expire_minutes,
            clock=clock,
        )

    def now(self) -> datetime:
        return as_utc(self._clock())

    # ---- one-time secrets ----

    @staticmethod
    def hash_secret(raw: str) -> str:
        """SHA-256 hex digest of a one-time secret."""
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()

    def issue_verification_code(self) -> IssuedSecret:
        """Uniform random code in [100000, 999999]."""
        code = str(100000 + secrets.randbelow(900000))
        return IssuedSecret(
            raw=code,
            digest=self.hash_secret(code),
            expires_at=self.now() + self.verification_code_ttl,
        )

    def issue_reset_token(self) -> IssuedSecret:
        token = secrets.token_hex(RESET_TOKEN_BYTES)
        return IssuedSecret(
            raw=token,
            digest=self.hash_secret(token),
            expires_at=self.now() + self.reset_token_ttl,
        )

    def check_secret(
        self,
        presented: str,
        stored_digest: Optional[str],
        expires_at: Optional[datetime],
    ) -> SecretStatus:
        """
        Compare a presented secret with the stored digest.

        A matching secret past its expiry is EXPIRED, so clients can offer a
        resend instead of reporting a typo.
        """
        if not stored_digest or expires_at is None:
            return SecretStatus.INVALID
        if not hmac.compare_digest(self.hash_secret(presented), stored_digest):
            return SecretStatus.INVALID
        if self.now() >= as_utc(expires_at):
            return SecretStatus.EXPIRED
        return SecretStatus.VALID

    # ---- session tokens ----

    def create_session_token(self, account_id: uuid.UUID, role: str) -> SessionToken:
        now = self.now()
        expire = now + self.session_ttl
        payload = {
            "sub": str(account_id),
            "id": str(account_id),
            "role": role,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
            "type": SESSION_TOKEN_TYPE,
        }
        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return SessionToken(token=token, expires_at=expire)

    def verify_session_token(self, token: str) -> AuthResult[SessionClaims]:
        """
        Check signature and expiry of a session token.

        Expiry is judged against this issuer's clock rather than the JWT
        library's, so the lifetime follows the same time source as issuance.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            return AuthResult.failure(AuthErrorKind.INVALID_SIGNATURE, "Invalid session token")

        if payload.get("type") != SESSION_TOKEN_TYPE:
            return AuthResult.failure(AuthErrorKind.INVALID_SIGNATURE, "Invalid session token")

        try:
            claims = SessionClaims(
                account_id=uuid.UUID(payload["sub"]),
                role=payload["role"],
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError):
            return AuthResult.failure(AuthErrorKind.INVALID_SIGNATURE, "Invalid session token")

        if self.now() >= claims.expires_at:
            return AuthResult.failure(AuthErrorKind.SESSION_EXPIRED, "Session has expired")

        return AuthResult.success(claims)
