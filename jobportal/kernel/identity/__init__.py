"""
Identity Core - credentials, one-time secrets, sessions and the auth workflow.
"""

from jobportal.kernel.identity.password import PasswordHasher, verify_password, hash_password
from jobportal.kernel.identity.errors import (
    AccountValidationError,
    AuthError,
    AuthErrorKind,
    AuthResult,
    DuplicateKeyError,
    StoreError,
)
from jobportal.kernel.identity.tokens import (
    IssuedSecret,
    SecretStatus,
    SessionClaims,
    SessionToken,
    TokenIssuer,
)
from jobportal.kernel.identity.account_store import AccountProfile, AccountStore
from jobportal.kernel.identity.auth_service import AuthService, EmailOutcome, SessionGrant

__all__ = [
    "PasswordHasher",
    "verify_password",
    "hash_password",
    "AccountValidationError",
    "AuthError",
    "AuthErrorKind",
    "AuthResult",
    "DuplicateKeyError",
    "StoreError",
    "IssuedSecret",
    "SecretStatus",
    "SessionClaims",
    "SessionToken",
    "TokenIssuer",
    "AccountProfile",
    "AccountStore",
    "AuthService",
    "EmailOutcome",
    "SessionGrant",
]
