"""
Auth workflow: register, verify, login, password reset.
"""

import re
import secrets
from dataclasses import dataclass
from typing import Optional

from jobportal.config import Settings
from jobportal.kernel.identity.account_store import (
    NAME_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
    USERNAME_MAX_LENGTH,
    AccountProfile,
    AccountStore,
    normalize_email,
)
from jobportal.kernel.identity.errors import (
    AccountValidationError,
    AuthErrorKind,
    AuthResult,
    DuplicateKeyError,
)
from jobportal.kernel.identity.password import PasswordHasher, burn_password_check, verify_password
from jobportal.kernel.identity.tokens import SecretStatus, SessionToken, TokenIssuer
from jobportal.kernel.models.account import Account, AccountRole
from jobportal.logging_config import get_logger
from jobportal.notifications import templates
from jobportal.notifications.email_sender import DeliveryReceipt, EmailSender, OutgoingEmail

logger = get_logger(__name__)

USERNAME_ATTEMPTS = 5

_CODE_PATTERN = re.compile(r"\d{6}")

_DUPLICATE_MESSAGES = {
    "email": "User with this email already exists",
    "username": "Username already taken",
}


@dataclass(frozen=True)
class SessionGrant:
    """An authenticated account and its new session token."""

    account: Account
    session: SessionToken


@dataclass(frozen=True)
class EmailOutcome:
    """Result of an operation whose side effect is an email."""

    account: Account
    receipt: DeliveryReceipt

    @property
    def delivered(self) -> bool:
        return self.receipt.delivered


def derive_username(email: str) -> str:
    """
    Build a username candidate from the email local part.

    Non-alphanumerics are dropped and a random 3-digit suffix is appended.
    """
    local = email.split("@", 1)[0].lower()
    base = re.sub(r"[^a-z0-9]", "", local)[: USERNAME_MAX_LENGTH - 3] or "user"
    return f"{base}{secrets.randbelow(1000):03d}"


class AuthService:
    """
    Sequences the account lifecycle over the credential store, the token
    issuer and the email sender.

    Every public operation returns an AuthResult. Email delivery failures
    never fail an operation: they are logged as DELIVERY_FAILED and reported
    through EmailOutcome.delivered.
    """

    def __init__(
        self,
        store: AccountStore,
        issuer: TokenIssuer,
        mailer: EmailSender,
        settings: Settings,
    ):
        self.store = store
        self.issuer = issuer
        self.mailer = mailer
        self.settings = settings

    async def register(
        self,
        email: Optional[str],
        password: Optional[str],
        name: Optional[str] = None,
        username: Optional[str] = None,
        role: Optional[str] = None,
        profile_image: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
    ) -> AuthResult[EmailOutcome]:
        """
        Create an unverified account and send it a verification code.

        Args:
            email: Address to register (lowercased)
            password: Plain text password
            name: Display name, defaults to the email local part
            username: Desired username, derived from the email when absent
            role: candidate, employer or admin (default: candidate)
            profile_image, phone, address: Optional profile details

        Returns:
            EmailOutcome for the new account, or VALIDATION_FAILED /
            DUPLICATE_KEY
        """
        missing = {}
        if not email or not email.strip():
            missing["email"] = "Email is required"
        if not password:
            missing["password"] = "Password is required"
        if missing:
            return AuthResult.failure(
                AuthErrorKind.VALIDATION_FAILED,
                "Email and password are required",
                field_errors=missing,
            )

        email = normalize_email(email)
        display_name = (name or "").strip() or email.split("@", 1)[0][:NAME_MAX_LENGTH]
        requested_username = (username or "").strip().lower() or None

        # Checked up front so a taken email wins over a taken username;
        # the unique index still catches concurrent registrations.
        if await self.store.find_by_email(email):
            return AuthResult.failure(
                AuthErrorKind.DUPLICATE_KEY,
                _DUPLICATE_MESSAGES["email"],
                field="email",
            )

        account = None
        for _ in range(USERNAME_ATTEMPTS):
            candidate = requested_username or derive_username(email)
            if requested_username is None and await self.store.find_by_username(candidate):
                continue
            profile = AccountProfile(
                name=display_name,
                username=candidate,
                email=email,
                password=password,
                role=role or AccountRole.CANDIDATE,
                profile_image=profile_image or "",
                phone=phone or "",
                address=address or "",
            )
            try:
                account = await self.store.create(profile)
            except AccountValidationError as exc:
                return AuthResult.failure(
                    AuthErrorKind.VALIDATION_FAILED,
                    "Validation failed",
                    field_errors=exc.field_errors,
                )
            except DuplicateKeyError as exc:
                if exc.field == "username" and requested_username is None:
                    continue
                return AuthResult.failure(
                    AuthErrorKind.DUPLICATE_KEY,
                    _DUPLICATE_MESSAGES.get(exc.field, "Duplicate field value entered"),
                    field=exc.field,
                )
            break

        if account is None:
            return AuthResult.failure(
                AuthErrorKind.DUPLICATE_KEY,
                "Could not allocate a unique username, please choose one",
                field="username",
            )

        receipt = await self._send_verification_code(account, resend=False)
        return AuthResult.success(EmailOutcome(account=account, receipt=receipt))

    async def verify_email(
        self,
        email: Optional[str],
        code: Optional[str],
    ) -> AuthResult[SessionGrant]:
        """
        Consume a verification code and open a session.

        Returns:
            SessionGrant, or VALIDATION_FAILED / NOT_FOUND / INVALID_TOKEN /
            TOKEN_EXPIRED
        """
        if not email or not email.strip():
            return AuthResult.failure(
                AuthErrorKind.VALIDATION_FAILED,
                "Email is required for verification",
                field_errors={"email": "Email is required"},
            )
        code = (code or "").strip()
        if not _CODE_PATTERN.fullmatch(code):
            return AuthResult.failure(
                AuthErrorKind.VALIDATION_FAILED,
                "Invalid token format. Please enter a valid 6-digit code.",
                field_errors={"token": "Must be a 6-digit code"},
            )

        account = await self.store.find_by_email(email)
        if account is None:
            return AuthResult.failure(AuthErrorKind.NOT_FOUND, "No account found with this email")

        status = self.issuer.check_secret(
            code,
            account.email_verification_secret,
            account.email_verification_expires_at,
        )
        if status is SecretStatus.INVALID:
            return AuthResult.failure(
                AuthErrorKind.INVALID_TOKEN,
                "Invalid verification token. Please check your email and try again.",
            )
        if status is SecretStatus.EXPIRED:
            return AuthResult.failure(
                AuthErrorKind.TOKEN_EXPIRED,
                "Verification token has expired. Please request a new verification code.",
            )

        account.mark_email_verified()
        await self.store.save(account)
        logger.info("Email verified", extra={"account_id": str(account.id)})

        session = self.issuer.create_session_token(account.id, account.role_value)
        return AuthResult.success(SessionGrant(account=account, session=session))

    async def resend_verification(self, email: Optional[str]) -> AuthResult[EmailOutcome]:
        """Replace the pending verification code with a fresh one and send it."""
        if not email or not email.strip():
            return AuthResult.failure(
                AuthErrorKind.VALIDATION_FAILED,
                "Email is required",
                field_errors={"email": "Email is required"},
            )

        account = await self.store.find_by_email(email)
        if account is None:
            return AuthResult.failure(AuthErrorKind.NOT_FOUND, "User not found")
        if account.is_email_verified:
            return AuthResult.failure(AuthErrorKind.ALREADY_VERIFIED, "Email is already verified")

        receipt = await self._send_verification_code(account, resend=True)
        return AuthResult.success(EmailOutcome(account=account, receipt=receipt))

    async def login(
        self,
        email: Optional[str],
        password: Optional[str],
    ) -> AuthResult[SessionGrant]:
        """
        Check credentials and open a session.

        Unknown email and wrong password fail identically with
        INVALID_CREDENTIALS.
        """
        if not email or not password:
            return AuthResult.failure(
                AuthErrorKind.VALIDATION_FAILED,
                "Please provide an email and password",
                field_errors={
                    key: "This field is required"
                    for key, value in (("email", email), ("password", password))
                    if not value
                },
            )

        account = await self.store.find_by_email(email)
        if account is None:
            burn_password_check(password)
            return AuthResult.failure(AuthErrorKind.INVALID_CREDENTIALS, "Invalid credentials")
        if not verify_password(password, account.password_hash):
            return AuthResult.failure(AuthErrorKind.INVALID_CREDENTIALS, "Invalid credentials")

        if not account.is_email_verified:
            return AuthResult.failure(
                AuthErrorKind.EMAIL_NOT_VERIFIED,
                "Please verify your email before logging in",
            )

        if PasswordHasher.needs_rehash(account.password_hash):
            await self.store.change_password(account, password)
            logger.info("Password hash upgraded", extra={"account_id": str(account.id)})

        session = self.issuer.create_session_token(account.id, account.role_value)
        logger.info("Login succeeded", extra={"account_id": str(account.id)})
        return AuthResult.success(SessionGrant(account=account, session=session))

    async def forgot_password(self, email: Optional[str]) -> AuthResult[EmailOutcome]:
        """Issue a reset token and email the reset link."""
        if not email or not email.strip():
            return AuthResult.failure(
                AuthErrorKind.VALIDATION_FAILED,
                "Email is required",
                field_errors={"email": "Email is required"},
            )

        account = await self.store.find_by_email(email)
        if account is None:
            return AuthResult.failure(AuthErrorKind.NOT_FOUND, "No user found with this email")

        secret = self.issuer.issue_reset_token()
        account.set_reset(secret.digest, secret.expires_at)
        await self.store.save(account)

        reset_url = f"{self.settings.client_url.rstrip('/')}/reset-password/{secret.raw}"
        receipt = await self._deliver(
            account,
            "password_reset",
            templates.password_reset_email(
                to=account.email,
                name=account.name,
                reset_url=reset_url,
                expires_minutes=self.settings.reset_token_expire_minutes,
                brand=self.settings.smtp_from_name,
            ),
        )
        return AuthResult.success(EmailOutcome(account=account, receipt=receipt))

    async def reset_password(
        self,
        token: Optional[str],
        new_password: Optional[str],
    ) -> AuthResult[EmailOutcome]:
        """
        Consume a reset token and set a new password.

        Returns:
            EmailOutcome for the confirmation notice, or VALIDATION_FAILED /
            INVALID_TOKEN / TOKEN_EXPIRED
        """
        if not new_password or len(new_password) < PASSWORD_MIN_LENGTH:
            return AuthResult.failure(
                AuthErrorKind.VALIDATION_FAILED,
                f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
                field_errors={"password": f"Password must be at least {PASSWORD_MIN_LENGTH} characters"},
            )
        if not token:
            return AuthResult.failure(AuthErrorKind.INVALID_TOKEN, "Invalid reset token")

        account = await self.store.find_by_reset_secret(self.issuer.hash_secret(token))
        if account is None:
            return AuthResult.failure(AuthErrorKind.INVALID_TOKEN, "Invalid reset token")

        status = self.issuer.check_secret(token, account.reset_secret, account.reset_expires_at)
        if status is SecretStatus.INVALID:
            return AuthResult.failure(AuthErrorKind.INVALID_TOKEN, "Invalid reset token")
        if status is SecretStatus.EXPIRED:
            return AuthResult.failure(
                AuthErrorKind.TOKEN_EXPIRED,
                "Reset token has expired. Please request a new one.",
            )

        account.clear_reset()
        await self.store.change_password(account, new_password)
        logger.info("Password reset", extra={"account_id": str(account.id)})

        receipt = await self._deliver(
            account,
            "password_reset_confirmation",
            templates.password_reset_confirmation_email(
                to=account.email,
                name=account.name,
                brand=self.settings.smtp_from_name,
            ),
        )
        return AuthResult.success(EmailOutcome(account=account, receipt=receipt))

    async def logout(self) -> AuthResult[None]:
        """Sessions are not tracked server-side; the client drops its token."""
        return AuthResult.success(None)

    async def authenticate_session(self, token: str) -> AuthResult[Account]:
        """Resolve a bearer session token to its account."""
        verified = self.issuer.verify_session_token(token)
        if not verified.ok:
            return AuthResult(error=verified.error)

        account = await self.store.find_by_id(verified.value.account_id)
        if account is None:
            return AuthResult.failure(AuthErrorKind.NOT_FOUND, "User not found")
        return AuthResult.success(account)

    async def _send_verification_code(self, account: Account, *, resend: bool) -> DeliveryReceipt:
        """Issue a code (replacing any pending one), persist its digest and mail it."""
        secret = self.issuer.issue_verification_code()
        account.set_email_verification(secret.digest, secret.expires_at)
        await self.store.save(account)

        return await self._deliver(
            account,
            "email_verification",
            templates.verification_code_email(
                to=account.email,
                name=account.name,
                code=secret.raw,
                expires_minutes=self.settings.verification_code_expire_minutes,
                brand=self.settings.smtp_from_name,
                resend=resend,
            ),
        )

    async def _deliver(self, account: Account, purpose: str, email: OutgoingEmail) -> DeliveryReceipt:
        receipt = await self.mailer.send(email)
        if not receipt.delivered:
            logger.warning(
                "Email delivery failed",
                extra={
                    "account_id": str(account.id),
                    "purpose": purpose,
                    "kind": AuthErrorKind.DELIVERY_FAILED.value,
                    "error": receipt.error,
                },
            )
        return receipt
