"""User persistence: the credential store."""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError
from ..models.base import utcnow
from ..models.user import User


def _as_uuid(value: Union[str, uuid.UUID]) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


class UserRepository:
    """Lookup and atomic field updates on ``User`` rows.

    Every mutation commits immediately; email uniqueness is enforced by the
    table's unique index and surfaces as ``ConflictError``.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: Union[str, uuid.UUID]) -> Optional[User]:
        """Get user by ID; an unparseable ID finds nothing."""
        parsed = _as_uuid(user_id)
        if parsed is None:
            return None
        return await self.db.get(User, parsed)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email (exact match)."""
        stmt = select(User).where(User.email == email)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self) -> List[User]:
        stmt = select(User).order_by(User.joined_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create(self, **fields: Any) -> User:
        """Create a user; a duplicate email raises ``ConflictError``."""
        user = User(**fields)
        self.db.add(user)
        await self._commit()
        await self.db.refresh(user)
        return user

    async def set_verification_code(
        self,
        user: User,
        code: str,
        expires: datetime
    ) -> User:
        """Store a code, replacing whatever code was in flight."""
        user.verification_code = code
        user.verification_expires = expires
        await self._commit()
        return user

    async def mark_verified(self, user: User) -> User:
        user.verified = True
        user.verification_code = None
        user.verification_expires = None
        await self._commit()
        return user

    async def set_password(self, user: User, password_hash: str) -> User:
        """Replace the password hash and consume the reset code."""
        user.password_hash = password_hash
        user.verification_code = None
        user.verification_expires = None
        await self._commit()
        return user

    async def update_fields(self, user: User, changes: Dict[str, Any]) -> User:
        for field, value in changes.items():
            setattr(user, field, value)
        user.updated_at = utcnow()
        await self._commit()
        await self.db.refresh(user)
        return user

    async def delete(self, user: User) -> None:
        await self.db.delete(user)
        await self.db.commit()

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError() from e
