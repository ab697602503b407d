"""Create a verified admin account, or promote an existing user to admin.

Usage::

    python -m todo_api.create_admin admin@example.com 'Secret1' 'Site Admin'
"""
import argparse
import asyncio
import uuid
from typing import Optional, Sequence

from starlette.concurrency import run_in_threadpool

from .core.auth import password_hasher
from .core.logging import configure_logging
from .core.validation import validate_email, validate_password, MSG_INVALID_EMAIL, MSG_PASSWORD_POLICY
from .database import close_db, get_session_factory, init_db
from .models.user import User, UserRole
from .services.users import UserRepository


async def create_admin(email: str, password: str, name: str) -> User:
    """Create the admin, or promote and verify the user already holding ``email``."""
    async with get_session_factory()() as session:
        users = UserRepository(session)

        existing = await users.get_by_email(email)
        if existing is not None:
            if existing.role == UserRole.ADMIN.value and existing.verified:
                print(f"User '{email}' is already an admin.")
                return existing
            await users.update_fields(
                existing,
                {"role": UserRole.ADMIN.value, "verified": True,
                 "verification_code": None, "verification_expires": None},
            )
            print(f"Promoted user: {email} (role: admin)")
            return existing

        password_hash = await run_in_threadpool(password_hasher.hash_password, password)
        user = await users.create(
            personal_id=f"admin-{uuid.uuid4().hex[:8]}",
            name=name,
            email=email,
            password_hash=password_hash,
            role=UserRole.ADMIN.value,
            verified=True,
        )
        print(f"Created user: {email} (role: admin)")
        return user


async def _run(email: str, password: str, name: str) -> None:
    await init_db()
    try:
        await create_admin(email, password, name)
    finally:
        await close_db()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Create or promote an admin user.")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (ignored when promoting)")
    parser.add_argument("name", help="Display name")
    args = parser.parse_args(argv)

    if not validate_email(args.email):
        parser.error(MSG_INVALID_EMAIL)
    if not validate_password(args.password):
        parser.error(MSG_PASSWORD_POLICY)

    configure_logging()
    asyncio.run(_run(args.email, args.password, args.name))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
