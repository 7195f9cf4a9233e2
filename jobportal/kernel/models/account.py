"""
Account model for identity management.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from jobportal.kernel.models.base import Base, TimestampMixin, generate_uuid


class AccountRole(str, Enum):
    """Account roles in the portal."""
    CANDIDATE = "candidate"
    EMPLOYER = "employer"
    ADMIN = "admin"


class Account(Base, TimestampMixin):
    """
    Registered identity with credential and verification state.

    The verification and reset secrets are SHA-256 digests; the raw values
    only ever exist in the email sent to the account holder.
    """

    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint(
            "(email_verification_secret IS NULL) = (email_verification_expires_at IS NULL)",
            name="ck_accounts_verification_pair",
        ),
        CheckConstraint(
            "(reset_secret IS NULL) = (reset_expires_at IS NULL)",
            name="ck_accounts_reset_pair",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    username: Mapped[str] = mapped_column(
        String(30),
        unique=True,
        index=True,
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    role: Mapped[AccountRole] = mapped_column(
        String(20),
        default=AccountRole.CANDIDATE,
        nullable=False,
    )

    # Optional profile details, empty until the account holder fills them in
    profile_image: Mapped[str] = mapped_column(
        String(500),
        default="",
        server_default="",
        nullable=False,
    )
    phone: Mapped[str] = mapped_column(
        String(30),
        default="",
        server_default="",
        nullable=False,
    )
    address: Mapped[str] = mapped_column(
        String(255),
        default="",
        server_default="",
        nullable=False,
    )

    # Email verification
    is_email_verified: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    email_verification_secret: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
    )
    email_verification_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Password reset
    reset_secret: Mapped[Optional[str]] = mapped_column(
        String(64),
        index=True,
        nullable=True,
    )
    reset_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    @property
    def role_value(self) -> str:
        # role may be enum or str when loaded from the database
        return self.role.value if hasattr(self.role, "value") else self.role

    def set_email_verification(self, digest: str, expires_at: datetime) -> None:
        """Store a verification secret, replacing any earlier one."""
        self.email_verification_secret = digest
        self.email_verification_expires_at = expires_at

    def clear_email_verification(self) -> None:
        self.email_verification_secret = None
        self.email_verification_expires_at = None

    def mark_email_verified(self) -> None:
        """Consume the verification secret and flag the address as verified."""
        self.is_email_verified = True
        self.clear_email_verification()

    def set_reset(self, digest: str, expires_at: datetime) -> None:
        """Store a password reset secret, replacing any earlier one."""
        self.reset_secret = digest
        self.reset_expires_at = expires_at

    def clear_reset(self) -> None:
        self.reset_secret = None
        self.reset_expires_at = None

    def __repr__(self) -> str:
        return f"<Account {self.email}>"
