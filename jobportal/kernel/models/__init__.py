"""
Kernel Data Models

SQLAlchemy models backing the credential store.
"""

from jobportal.kernel.models.base import Base, TimestampMixin, as_utc, generate_uuid, utcnow
from jobportal.kernel.models.account import Account, AccountRole

__all__ = [
    "Base",
    "TimestampMixin",
    "as_utc",
    "generate_uuid",
    "utcnow",
    "Account",
    "AccountRole",
]
