"""
Credential store: persistence of accounts and their secret state.
"""

import re
import uuid
from dataclasses import dataclass
from typing import Dict, Optional, Union

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jobportal.kernel.identity.errors import AccountValidationError, DuplicateKeyError
from jobportal.kernel.identity.password import hash_password
from jobportal.kernel.models.account import Account, AccountRole
from jobportal.logging_config import get_logger

logger = get_logger(__name__)

NAME_MAX_LENGTH = 50
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 6

# Optional profile fields and their column widths
PROFILE_FIELD_MAX_LENGTHS = {
    "profile_image": 500,
    "phone": 30,
    "address": 255,
}

_USERNAME_PATTERN = re.compile(r"^[a-z0-9._-]+$")

# How each unique column shows up in SQLite / PostgreSQL error messages
_UNIQUE_MARKERS = {
    "username": ("accounts.username", "ix_accounts_username", "(username)"),
    "email": ("accounts.email", "ix_accounts_email", "(email)"),
}


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass
class AccountProfile:
    """Everything needed to create an account."""

    name: str
    username: str
    email: str
    password: str
    role: Union[AccountRole, str] = AccountRole.CANDIDATE
    profile_image: str = ""
    phone: str = ""
    address: str = ""


def validate_profile(profile: AccountProfile) -> Dict[str, str]:
    """
    Apply the account schema rules.

    Returns:
        Mapping of field name to message; empty when the profile is valid
    """
    errors: Dict[str, str] = {}

    name = (profile.name or "").strip()
    if not name:
        errors["name"] = "Please add a name"
    elif len(name) > NAME_MAX_LENGTH:
        errors["name"] = f"Name cannot be more than {NAME_MAX_LENGTH} characters"

    username = (profile.username or "").strip().lower()
    if len(username) < USERNAME_MIN_LENGTH:
        errors["username"] = f"Username must be at least {USERNAME_MIN_LENGTH} characters"
    elif len(username) > USERNAME_MAX_LENGTH:
        errors["username"] = f"Username cannot be more than {USERNAME_MAX_LENGTH} characters"
    elif not _USERNAME_PATTERN.match(username):
        errors["username"] = "Username may only contain letters, digits, '.', '_' and '-'"

    try:
        validate_email(normalize_email(profile.email or ""), check_deliverability=False)
    except EmailNotValidError:
        errors["email"] = "Please add a valid email"

    if len(profile.password or "") < PASSWORD_MIN_LENGTH:
        errors["password"] = f"Password must be at least {PASSWORD_MIN_LENGTH} characters"

    try:
        AccountRole(profile.role)
    except ValueError:
        allowed = ", ".join(r.value for r in AccountRole)
        errors["role"] = f"Role must be one of: {allowed}"

    for field, max_length in PROFILE_FIELD_MAX_LENGTHS.items():
        if len((getattr(profile, field) or "").strip()) > max_length:
            errors[field] = f"Cannot be more than {max_length} characters"

    return errors


def _duplicate_field(exc: IntegrityError) -> Optional[str]:
    """Name the unique column behind an IntegrityError, if it was one."""
    message = str(exc.orig or exc).lower()
    if "unique" not in message and "duplicate" not in message:
        return None
    for field, markers in _UNIQUE_MARKERS.items():
        if any(marker in message for marker in markers):
            return field
    return None


class AccountStore:
    """
    Account persistence on top of an AsyncSession.

    Writes are flushed, not committed; the request-scoped session commits.
    Uniqueness of email and username comes from the unique indexes, so two
    concurrent registrations cannot both succeed.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, account_id: uuid.UUID) -> Optional[Account]:
        query = select(Account).where(Account.id == account_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> Optional[Account]:
        query = select(Account).where(Account.email == normalize_email(email))
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def find_by_username(self, username: str) -> Optional[Account]:
        query = select(Account).where(Account.username == username.strip().lower())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def find_by_reset_secret(self, digest: str) -> Optional[Account]:
        query = select(Account).where(Account.reset_secret == digest)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def create(self, profile: AccountProfile) -> Account:
        """
        Insert a new, unverified account.

        Raises:
            AccountValidationError: profile breaks a schema rule
            DuplicateKeyError: email or username already taken
        """
        errors = validate_profile(profile)
        if errors:
            raise AccountValidationError(errors)

        account = Account(
            name=profile.name.strip(),
            username=profile.username.strip().lower(),
            email=normalize_email(profile.email),
            password_hash=hash_password(profile.password),
            role=AccountRole(profile.role).value,
            profile_image=(profile.profile_image or "").strip(),
            phone=(profile.phone or "").strip(),
            address=(profile.address or "").strip(),
            is_email_verified=False,
        )
        self.session.add(account)
        await self._flush()
        logger.info("Account created", extra={"account_id": str(account.id)})
        return account

    async def save(self, account: Account) -> Account:
        """Persist changes to an existing account."""
        self.session.add(account)
        await self._flush()
        return account

    async def change_password(self, account: Account, new_password: str) -> Account:
        """Hash and store a new password."""
        account.password_hash = hash_password(new_password)
        return await self.save(account)

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            field = _duplicate_field(exc)
            if field is None:
                raise
            raise DuplicateKeyError(field) from exc
