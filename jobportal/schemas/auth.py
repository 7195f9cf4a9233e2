"""
Authentication schemas.

Request bodies are all optional strings; the auth
service applies the field rules so every validation failure gets the same
400 envelope.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from jobportal.schemas.common import CamelModel


class RegisterRequest(BaseModel):
    """Account registration request."""

    name: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("name", "fullName", "full_name"),
    )
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    profile_image: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("profileImage", "profile_image"),
    )
    phone: Optional[str] = None
    address: Optional[str] = None


class VerifyEmailRequest(BaseModel):
    email: Optional[str] = None
    token: Optional[str] = None


class EmailRequest(BaseModel):
    """Body for resend-verification and forgot-password."""

    email: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    password: Optional[str] = None


class AccountResponse(CamelModel):
    """Public account profile. Never carries the password hash or secrets."""

    id: uuid.UUID
    name: str
    username: str
    email: str
    role: str
    profile_image: str = ""
    phone: str = ""
    address: str = ""
    is_email_verified: bool
    created_at: datetime


class SessionResponse(CamelModel):
    """Session token handed to the client after verification or login."""

    token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: AccountResponse


class RegistrationResponse(CamelModel):
    user_id: uuid.UUID
    email: str
    name: str
    requires_verification: bool = True
    email_delivered: bool


class DeliveryResponse(CamelModel):
    """Outcome of an operation that sends an email."""

    email_delivered: bool
