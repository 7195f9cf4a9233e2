"""
Mapping from identity failure kinds to HTTP responses.
"""

from typing import TypeVar

from fastapi import HTTPException, status

from jobportal.kernel.identity.errors import AuthError, AuthErrorKind, AuthResult

T = TypeVar("T")

STATUS_BY_KIND = {
    AuthErrorKind.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.DUPLICATE_KEY: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.ALREADY_VERIFIED: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.INVALID_TOKEN: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.TOKEN_EXPIRED: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.INVALID_SIGNATURE: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.SESSION_EXPIRED: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.EMAIL_NOT_VERIFIED: status.HTTP_403_FORBIDDEN,
    AuthErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    AuthErrorKind.DELIVERY_FAILED: status.HTTP_502_BAD_GATEWAY,
    AuthErrorKind.UNEXPECTED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class AuthHTTPException(HTTPException):
    """HTTPException carrying the AuthError it was raised for."""

    def __init__(self, error: AuthError):
        headers = None
        status_code = STATUS_BY_KIND.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
        if status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        super().__init__(status_code=status_code, detail=error.message, headers=headers)
        self.error = error


def unwrap(result: AuthResult[T]) -> T:
    """Return the value of a successful result or raise its HTTP error."""
    if result.error is not None:
        raise AuthHTTPException(result.error)
    return result.value
