"""Profile reads and admin user management."""
from dataclasses import dataclass
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.logging import BusinessLogger
from ..core.security import Identity
from ..core.validation import (
    MIN_NAME_LENGTH,
    MSG_INVALID_EMAIL,
    MSG_NAME_TOO_SHORT,
    validate_email,
)
from ..models.user import User, UserRole
from .users import UserRepository


@dataclass(frozen=True)
class FieldPermission:
    self_editable: bool
    admin_editable: bool
    allow_blank: bool = True

    def editable_by(self, identity: Identity) -> bool:
        return self.admin_editable if identity.is_admin else self.self_editable


PROFILE_FIELD_PERMISSIONS: Dict[str, FieldPermission] = {
    "personal_id": FieldPermission(self_editable=True, admin_editable=True, allow_blank=False),
    "name": FieldPermission(self_editable=True, admin_editable=True, allow_blank=False),
    "email": FieldPermission(self_editable=False, admin_editable=True, allow_blank=False),
    "role": FieldPermission(self_editable=False, admin_editable=True, allow_blank=False),
    "address": FieldPermission(self_editable=True, admin_editable=True),
    "phone_number": FieldPermission(self_editable=True, admin_editable=True),
    "bio": FieldPermission(self_editable=True, admin_editable=True),
    "user_image": FieldPermission(self_editable=True, admin_editable=True, allow_blank=False),
}


def permitted_changes(identity: Identity, requested: Dict[str, Any]) -> Dict[str, Any]:
    """Keep the requested fields the caller may edit; drop the rest silently."""
    changes = {}
    for field, value in requested.items():
        permission = PROFILE_FIELD_PERMISSIONS.get(field)
        if permission is None or value is None:
            continue
        if not permission.editable_by(identity):
            continue
        if value == "" and not permission.allow_blank:
            continue
        changes[field] = value
    return changes


class ProfileService:
    def __init__(self, db: AsyncSession):
        self.users = UserRepository(db)

    async def get_profile(self, user_id: str) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def list_users(self) -> List[User]:
        return await self.users.list_all()

    async def update_user(
        self,
        identity: Identity,
        user_id: str,
        requested: Dict[str, Any]
    ) -> User:
        user = await self.get_profile(user_id)
        changes = permitted_changes(identity, requested)

        if "name" in changes and len(changes["name"]) < MIN_NAME_LENGTH:
            raise ValidationError(MSG_NAME_TOO_SHORT)

        if "role" in changes and changes["role"] not in {r.value for r in UserRole}:
            raise ValidationError("Invalid role")

        if "email" in changes:
            if changes["email"] == user.email:
                del changes["email"]
            elif not validate_email(changes["email"]):
                raise ValidationError(MSG_INVALID_EMAIL)
            elif await self.users.get_by_email(changes["email"]) is not None:
                raise ConflictError()

        if changes:
            user = await self.users.update_fields(user, changes)
        BusinessLogger.log_user_updated(str(user.id), identity.id, sorted(changes))
        return user

    async def delete_user(self, identity: Identity, user_id: str) -> None:
        user = await self.get_profile(user_id)
        await self.users.delete(user)
        BusinessLogger.log_user_deleted(user_id, identity.id)
