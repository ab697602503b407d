"""Test configuration and fixtures."""
import os

# Settings are read at import time, so the test environment goes first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("AUTH_BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")

from typing import List, Tuple

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from todo_api.core.auth import password_hasher, token_service
from todo_api.database import get_db
from todo_api.main import app as default_app
from todo_api.models.base import Base, utcnow
from todo_api.models.user import User
from todo_api.services.email import get_email_sender

TEST_DATABASE_URL = "sqlite+aiosqlite://"

USER_PASSWORD = "Passw0rd"
ADMIN_PASSWORD = "Adm1nPass"


class FakeEmailSender:
    """Records outgoing mail instead of talking to SMTP."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.sent: List[Tuple[str, str, str]] = []

    async def send(self, recipient: str, subject: str, body: str) -> bool:
        self.sent.append((recipient, subject, body))
        return self.succeed


@pytest_asyncio.fixture
async def async_engine():
    """Create async engine for tests."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(async_engine):
    """Create async session for tests."""
    session_factory = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with session_factory() as session:
        yield session


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
def app():
    return default_app


@pytest_asyncio.fixture
async def client(app, async_session, email_sender):
    """HTTP client against the app with database and mail overridden."""

    async def override_get_db():
        yield async_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: email_sender

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client

    app.dependency_overrides.clear()


async def make_user(
    session: AsyncSession,
    email: str,
    password: str = USER_PASSWORD,
    *,
    name: str = "Test User",
    role: str = "user",
    verified: bool = True,
    code: str = None,
    expires=None,
) -> User:
    user = User(
        personal_id="ID-0001",
        name=name,
        email=email,
        password_hash=password_hasher.hash_password(password),
        role=role,
        verified=verified,
        verification_code=code,
        verification_expires=expires,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def find_user(session: AsyncSession, email: str) -> User:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


@pytest_asyncio.fixture
async def test_user(async_session):
    """Create a verified regular user."""
    return await make_user(async_session, "test@example.com")


@pytest_asyncio.fixture
async def other_user(async_session):
    return await make_user(async_session, "other@example.com", name="Other User")


@pytest_asyncio.fixture
async def admin_user(async_session):
    """Create admin user."""
    return await make_user(async_session, "admin@example.com", ADMIN_PASSWORD, name="Admin User", role="admin")


def bearer(user: User) -> dict:
    access_token = token_service.issue_access(str(user.id), user.role)
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def auth_headers(test_user):
    """Create authorization headers for test user."""
    return bearer(test_user)


@pytest.fixture
def admin_headers(admin_user):
    """Create authorization headers for admin user."""
    return bearer(admin_user)


@pytest.fixture
def now():
    return utcnow()
