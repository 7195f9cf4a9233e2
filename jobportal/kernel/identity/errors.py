"""
Failure kinds and result types for the identity core.

Workflow operations return an AuthResult instead of raising, so callers
branch on AuthError.kind. The credential store raises the typed exceptions
at the bottom of this module; AuthService converts them into results.
"""

from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class AuthErrorKind(str, Enum):
    """Tagged failure kinds surfaced by identity operations."""
    VALIDATION_FAILED = "validation_failed"
    DUPLICATE_KEY = "duplicate_key"
    NOT_FOUND = "not_found"
    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_NOT_VERIFIED = "email_not_verified"
    ALREADY_VERIFIED = "already_verified"
    INVALID_TOKEN = "invalid_token"
    TOKEN_EXPIRED = "token_expired"
    INVALID_SIGNATURE = "invalid_signature"
    SESSION_EXPIRED = "session_expired"
    DELIVERY_FAILED = "delivery_failed"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class AuthError:
    """A failure with a client-safe message."""

    kind: AuthErrorKind
    message: str
    field: Optional[str] = None
    field_errors: Dict[str, str] = dataclass_field(default_factory=dict)


@dataclass(frozen=True)
class AuthResult(Generic[T]):
    """Either a value or an AuthError."""

    value: Optional[T] = None
    error: Optional[AuthError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "AuthResult[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        kind: AuthErrorKind,
        message: str,
        *,
        field: Optional[str] = None,
        field_errors: Optional[Dict[str, str]] = None,
    ) -> "AuthResult[T]":
        return cls(
            error=AuthError(
                kind=kind,
                message=message,
                field=field,
                field_errors=dict(field_errors or {}),
            )
        )


class StoreError(Exception):
    """Base class for credential store failures."""

    kind: AuthErrorKind = AuthErrorKind.UNEXPECTED


class DuplicateKeyError(StoreError):
    """A unique index rejected the write."""

    kind = AuthErrorKind.DUPLICATE_KEY

    def __init__(self, field: str):
        super().__init__(f"Duplicate value for {field}")
        self.field = field


class AccountValidationError(StoreError):
    """The account profile breaks one or more schema rules."""

    kind = AuthErrorKind.VALIDATION_FAILED

    def __init__(self, field_errors: Dict[str, str]):
        super().__init__(", ".join(field_errors.values()))
        self.field_errors = field_errors
