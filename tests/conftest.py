"""Pytest configuration and shared fixtures."""

import os

# Settings are cached on first use, so the environment must be set before
# anything from quillify is imported.
os.environ["QUILLIFY_ENVIRONMENT"] = "testing"
os.environ["QUILLIFY_BCRYPT_ROUNDS"] = "4"
os.environ["QUILLIFY_SECRET_KEY"] = "test-secret-key-for-session-signing-0123456789"
os.environ["QUILLIFY_CRON_SECRET"] = "test-cron-secret"
os.environ["QUILLIFY_APP_URL"] = "http://app.test"
os.environ["QUILLIFY_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["QUILLIFY_EMAIL_PROVIDER"] = "console"
os.environ["QUILLIFY_LOG_FORMAT"] = "console"

import re  # noqa: E402
from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from quillify.core.config import get_settings  # noqa: E402
from quillify.infrastructure.auth.password_hasher import hash_password  # noqa: E402
from quillify.infrastructure.persistence import models  # noqa: E402, F401
from quillify.infrastructure.persistence.database import Base  # noqa: E402
from quillify.infrastructure.persistence.models import UserModel  # noqa: E402
from quillify.infrastructure.services.email.email_provider import EmailProvider  # noqa: E402
from quillify.infrastructure.services.email_service import EmailService  # noqa: E402

TEST_PASSWORD = "Password123"

_TOKEN_RE = re.compile(r"token=([0-9a-f]{64})")


class RecordingProvider(EmailProvider):
    """Email provider that keeps every message instead of sending it."""

    def __init__(self) -> None:
        self.messages: list[dict] = []
        self.fail = False

    async def send_email(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: str,
        from_email: str,
        from_name: str,
        reply_to: str | None = None,
        category: str | None = None,
    ) -> bool:
        if self.fail:
            raise ConnectionError("SMTP server unavailable")
        self.messages.append(
            {
                "to": to,
                "subject": subject,
                "html_body": html_body,
                "text_body": text_body,
                "category": category,
            }
        )
        return True

    @property
    def last(self) -> dict:
        return self.messages[-1]

    def last_token(self) -> str:
        """Raw token from the link in the most recent message."""
        match = _TOKEN_RE.search(self.last["text_body"])
        assert match, "no token link in the last email"
        return match.group(1)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(engine, expire_on_commit=False)

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def mail() -> RecordingProvider:
    return RecordingProvider()


@pytest.fixture
def email_service(mail, settings) -> EmailService:
    return EmailService(provider=mail, settings=settings)


@pytest.fixture
def make_user(db_session):
    """Factory inserting a user with a known password."""

    async def _make_user(
        email: str = "reader@example.com",
        password: str | None = TEST_PASSWORD,
        name: str | None = "Test Reader",
        verified_at=None,
    ) -> UserModel:
        user = UserModel(
            email=email,
            name=name,
            password_hash=hash_password(password) if password else None,
            email_verified_at=verified_at,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


@pytest_asyncio.fixture
async def client(db_session, email_service) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app, the test database and the recording mailer."""
    from quillify.infrastructure.api.app import app
    from quillify.infrastructure.persistence.database import get_db_session
    from quillify.infrastructure.services.email_service import get_email_service

    app.dependency_overrides[get_db_session] = lambda: db_session
    app.dependency_overrides[get_email_service] = lambda: email_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    """Sign in through the API and return the bearer headers."""

    async def _login(email: str, password: str = TEST_PASSWORD, remember_me: bool = False) -> dict:
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": email, "password": password, "remember_me": remember_me},
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login
