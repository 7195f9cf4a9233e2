"""
Pytest fixtures for the job portal auth tests.
"""

import os
import re
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, List

# Must be set before jobportal.config / jobportal.database are imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SMTP_HOST"] = ""
os.environ["SMTP_USER"] = ""
os.environ["SMTP_PASSWORD"] = ""
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from jobportal.config import get_settings

get_settings.cache_clear()

from jobportal.kernel.identity import AccountStore, AuthService, TokenIssuer
from jobportal.kernel.models import Base
from jobportal.notifications.email_sender import DeliveryReceipt, EmailSender, OutgoingEmail

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

CODE_RE = re.compile(r"\b(\d{6})\b")
RESET_TOKEN_RE = re.compile(r"/reset-password/([0-9a-f]{40})\b")


class FakeEmailSender(EmailSender):
    """Records outgoing mail; can be switched to fail every delivery."""

    def __init__(self):
        self.sent: List[OutgoingEmail] = []
        self.fail = False

    async def send(self, email: OutgoingEmail) -> DeliveryReceipt:
        self.sent.append(email)
        if self.fail:
            return DeliveryReceipt(delivered=False, error="SMTP connection error: ConnectionRefusedError")
        return DeliveryReceipt(delivered=True, message_id=f"<{len(self.sent)}@example.com>")

    def last_to(self, address: str) -> OutgoingEmail:
        for email in reversed(self.sent):
            if email.to == address:
                return email
        raise AssertionError(f"No email sent to {address}")

    def last_code(self, address: str) -> str:
        match = CODE_RE.search(self.last_to(address).text)
        assert match, "verification email carries no 6-digit code"
        return match.group(1)

    def last_reset_token(self, address: str) -> str:
        match = RESET_TOKEN_RE.search(self.last_to(address).text)
        assert match, "reset email carries no reset link"
        return match.group(1)


class MutableClock:
    """Clock that only moves when a test advances it."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """In-memory SQLite shared by every connection of one test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def issuer(settings, clock) -> TokenIssuer:
    """Token issuer on the test clock."""
    return TokenIssuer.from_settings(settings, clock=clock)


@pytest.fixture
def mailer() -> FakeEmailSender:
    return FakeEmailSender()


@pytest.fixture
def store(db_session) -> AccountStore:
    return AccountStore(db_session)


@pytest.fixture
def auth_service(store, issuer, mailer, settings) -> AuthService:
    return AuthService(store, issuer, mailer, settings)


@pytest_asyncio.fixture
async def client(session_maker, issuer, mailer) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app with the test database, clock and mailer."""
    from jobportal.api.deps import get_email_sender, get_token_issuer
    from jobportal.database import get_db
    from jobportal.main import app

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_issuer] = lambda: issuer
    app.dependency_overrides[get_email_sender] = lambda: mailer

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def candidate_payload() -> dict:
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "password": "Secret123",
    }


@pytest_asyncio.fixture
async def verified_account(auth_service, mailer):
    """A registered account that has completed email verification."""
    registered = await auth_service.register(
        email="verified@example.com",
        password="Secret123",
        name="Verified User",
    )
    assert registered.ok
    code = mailer.last_code("verified@example.com")
    verified = await auth_service.verify_email("verified@example.com", code)
    assert verified.ok
    return verified.value.account
