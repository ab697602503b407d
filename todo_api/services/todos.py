"""Per-user to-do items."""
import uuid
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, ValidationError
from ..models.base import utcnow
from ..models.todo import Todo
from ..schemas.todo import TodoCreate, TodoUpdate

MIN_TODO_NAME_LENGTH = 3
MAX_TODO_DESC_LENGTH = 500

TODO_NOT_FOUND = "Todo not found or you don't have permission to access it"


def _check_lengths(payload: TodoCreate) -> None:
    if payload.todo_name is not None and len(payload.todo_name.strip()) < MIN_TODO_NAME_LENGTH:
        raise ValidationError("Todo name must be at least 3 characters long")
    if payload.todo_desc is not None and len(payload.todo_desc) > MAX_TODO_DESC_LENGTH:
        raise ValidationError("Todo description cannot exceed 500 characters")


class TodoService:
    """CRUD on to-dos; every lookup is scoped to the owning user."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for(self, user_id: uuid.UUID) -> List[Todo]:
        stmt = (
            select(Todo)
            .where(Todo.user_id == user_id)
            .order_by(Todo.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_owned(self, user_id: uuid.UUID, todo_id: uuid.UUID) -> Todo:
        stmt = select(Todo).where(Todo.id == todo_id, Todo.user_id == user_id)
        result = await self.db.execute(stmt)
        todo = result.scalar_one_or_none()
        if todo is None:
            raise NotFoundError(TODO_NOT_FOUND)
        return todo

    async def create(self, user_id: uuid.UUID, payload: TodoCreate) -> Todo:
        if not payload.todo_name:
            raise ValidationError("Todo name is required")
        _check_lengths(payload)

        todo = Todo(
            user_id=user_id,
            todo_name=payload.todo_name.strip(),
            todo_desc=(payload.todo_desc or "").strip(),
            todo_status=payload.todo_status or "active",
            todo_priority=payload.todo_priority or "low",
            due_date=payload.due_date,
        )
        self.db.add(todo)
        await self.db.commit()
        await self.db.refresh(todo)
        return todo

    async def update(
        self,
        user_id: uuid.UUID,
        todo_id: uuid.UUID,
        payload: TodoUpdate
    ) -> Todo:
        todo = await self.get_owned(user_id, todo_id)
        _check_lengths(payload)

        changes = payload.model_dump(exclude_unset=True)
        if changes.get("todo_name"):
            todo.todo_name = changes["todo_name"].strip()
        if changes.get("todo_desc") is not None:
            todo.todo_desc = changes["todo_desc"].strip()
        if changes.get("todo_status"):
            todo.todo_status = changes["todo_status"]
        if changes.get("todo_priority"):
            todo.todo_priority = changes["todo_priority"]
        if "due_date" in changes:
            todo.due_date = changes["due_date"]

        todo.updated_at = utcnow()
        await self.db.commit()
        await self.db.refresh(todo)
        return todo

    async def delete(self, user_id: uuid.UUID, todo_id: uuid.UUID) -> None:
        todo = await self.get_owned(user_id, todo_id)
        await self.db.delete(todo)
        await self.db.commit()
