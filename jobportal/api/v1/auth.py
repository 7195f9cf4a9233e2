"""
Authentication endpoints.
"""

from fastapi import APIRouter, status

from jobportal.api.deps import Auth, CurrentAccount
from jobportal.api.errors import unwrap
from jobportal.kernel.identity.auth_service import EmailOutcome, SessionGrant
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
from jobportal.schemas.common import ApiResponse

router = APIRouter()

_UNDELIVERED_SUFFIX = " We could not send the email right now; please request a new one."


def _session_response(grant: SessionGrant) -> SessionResponse:
    return SessionResponse(
        token=grant.session.token,
        expires_at=grant.session.expires_at,
        user=AccountResponse.model_validate(grant.account),
    )


def _delivery_message(outcome: EmailOutcome, message: str) -> str:
    return message if outcome.delivered else message + _UNDELIVERED_SUFFIX


@router.post(
    "/register",
    response_model=ApiResponse[RegistrationResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register(data: RegisterRequest, auth: Auth):
    """
    Register a new account.

    The account starts unverified; a 6-digit code is emailed to the address.
    A failed email does not undo the registration.
    """
    outcome = unwrap(await auth.register(
        email=data.email,
        password=data.password,
        name=data.name,
        username=data.username,
        role=data.role,
        profile_image=data.profile_image,
        phone=data.phone,
        address=data.address,
    ))
    account = outcome.account

    return ApiResponse(
        message=_delivery_message(
            outcome,
            "Registration successful. Please check your email for verification code.",
        ),
        data=RegistrationResponse(
            user_id=account.id,
            email=account.email,
            name=account.name,
            email_delivered=outcome.delivered,
        ),
    )


@router.post("/verify-email", response_model=ApiResponse[SessionResponse])
async def verify_email(data: VerifyEmailRequest, auth: Auth):
    """Verify an email address with its 6-digit code and return a session token."""
    grant = unwrap(await auth.verify_email(email=data.email, code=data.token))
    return ApiResponse(message="Email verified successfully", data=_session_response(grant))


@router.post("/resend-verification", response_model=ApiResponse[DeliveryResponse])
async def resend_verification(data: EmailRequest, auth: Auth):
    """Send a fresh verification code; any earlier code stops working."""
    outcome = unwrap(await auth.resend_verification(email=data.email))
    return ApiResponse(
        message=_delivery_message(outcome, "New verification code sent successfully"),
        data=DeliveryResponse(email_delivered=outcome.delivered),
    )


@router.post("/login", response_model=ApiResponse[SessionResponse])
async def login(data: LoginRequest, auth: Auth):
    """Authenticate with email and password."""
    grant = unwrap(await auth.login(email=data.email, password=data.password))
    return ApiResponse(message="Login successful", data=_session_response(grant))


@router.post("/forgot-password", response_model=ApiResponse[DeliveryResponse])
async def forgot_password(data: EmailRequest, auth: Auth):
    """Email a password reset link valid for a limited time."""
    outcome = unwrap(await auth.forgot_password(email=data.email))
    return ApiResponse(
        message=_delivery_message(outcome, "Password reset email sent successfully"),
        data=DeliveryResponse(email_delivered=outcome.delivered),
    )


@router.put("/reset-password/{token}", response_model=ApiResponse[DeliveryResponse])
async def reset_password(token: str, data: ResetPasswordRequest, auth: Auth):
    """Set a new password using the token from the reset link."""
    outcome = unwrap(await auth.reset_password(token=token, new_password=data.password))
    return ApiResponse(
        message="Password reset successfully. You can now login with your new password.",
        data=DeliveryResponse(email_delivered=outcome.delivered),
    )


@router.get("/me", response_model=ApiResponse[AccountResponse])
async def get_me(account: CurrentAccount):
    """Get the authenticated account's profile."""
    return ApiResponse(message="OK", data=AccountResponse.model_validate(account))


@router.post("/logout", response_model=ApiResponse[None])
async def logout(auth: Auth):
    """
    Acknowledge a logout.

    Session tokens are not tracked server-side; the client discards its token.
    """
    unwrap(await auth.logout())
    return ApiResponse(message="Logged out successfully")
