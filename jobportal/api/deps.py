"""
FastAPI dependencies for authentication, services and database sessions.
"""

from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from jobportal.api.errors import unwrap
from jobportal.config import Settings, get_settings
from jobportal.database import get_db
from jobportal.kernel.identity.account_store import AccountStore
from jobportal.kernel.identity.auth_service import AuthService
from jobportal.kernel.identity.errors import AuthErrorKind, AuthResult
from jobportal.kernel.identity.tokens import TokenIssuer
from jobportal.kernel.models.account import Account
from jobportal.notifications.email_sender import EmailSender, build_email_sender

# Security scheme
security = HTTPBearer(auto_error=False)

DbSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]

# Built once from the settings on first use
_token_issuer: Optional[TokenIssuer] = None
_email_sender: Optional[EmailSender] = None


def get_token_issuer(settings: AppSettings) -> TokenIssuer:
    """Process-wide token issuer."""
    global _token_issuer
    if _token_issuer is None:
        _token_issuer = TokenIssuer.from_settings(settings)
    return _token_issuer


def get_email_sender(settings: AppSettings) -> EmailSender:
    """Process-wide email sender."""
    global _email_sender
    if _email_sender is None:
        _email_sender = build_email_sender(settings)
    return _email_sender


def get_auth_service(
    db: DbSession,
    settings: AppSettings,
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
    mailer: Annotated[EmailSender, Depends(get_email_sender)],
) -> AuthService:
    """Request-scoped auth workflow bound to this request's session."""
    return AuthService(AccountStore(db), issuer, mailer, settings)


Auth = Annotated[AuthService, Depends(get_auth_service)]


async def get_current_account(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    auth: Auth,
) -> Account:
    """Resolve the bearer session token or raise 401."""
    if not credentials:
        unwrap(AuthResult.failure(AuthErrorKind.INVALID_SIGNATURE, "Not authenticated"))

    return unwrap(await auth.authenticate_session(credentials.credentials))


CurrentAccount = Annotated[Account, Depends(get_current_account)]
