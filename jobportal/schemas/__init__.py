"""
Pydantic schemas for API requests and responses.
"""

from jobportal.schemas.common import ApiResponse, CamelModel, ErrorResponse, HealthResponse
from jobportal.schemas.auth import (
    AccountResponse,
    DeliveryResponse,
    EmailRequest,
    LoginRequest,
    RegisterRequest,
    RegistrationResponse,
    ResetPasswordRequest,
    SessionResponse,
    VerifyEmailRequest,
)

__all__ = [
    "ApiResponse",
    "CamelModel",
    "ErrorResponse",
    "HealthResponse",
    "AccountResponse",
    "DeliveryResponse",
    "EmailRequest",
    "LoginRequest",
    "RegisterRequest",
    "RegistrationResponse",
    "ResetPasswordRequest",
    "SessionResponse",
    "VerifyEmailRequest",
]
