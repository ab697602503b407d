"""Tests for the admin bootstrap command."""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from todo_api import create_admin as create_admin_module
from todo_api.core.auth import password_hasher

from conftest import find_user, make_user


@pytest.fixture
def session_factory(async_engine, monkeypatch):
    factory = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(create_admin_module, "get_session_factory", lambda: factory)
    return factory


async def test_creates_verified_admin(session_factory, async_session):
    """Test creating a new admin account."""
    await create_admin_module.create_admin("root@example.com", "Adm1nPass", "Site Admin")

    user = await find_user(async_session, "root@example.com")
    assert user.role == "admin"
    assert user.verified is True
    assert user.name == "Site Admin"
    assert password_hasher.verify_password("Adm1nPass", user.password_hash)


async def test_promotes_existing_user(session_factory, async_session):
    """Test promoting an existing user to admin."""
    await make_user(async_session, "pending@example.com", verified=False, code="a1b2c3")

    await create_admin_module.create_admin("pending@example.com", "Ignored1", "Ignored")

    async with session_factory() as session:
        user = await find_user(session, "pending@example.com")
    assert user.role == "admin"
    assert user.verified is True
    assert user.verification_code is None


def test_cli_rejects_weak_password():
    """Test the command line with a weak password."""
    with pytest.raises(SystemExit):
        create_admin_module.main(["root@example.com", "weak", "Site Admin"])
