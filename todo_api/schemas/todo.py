"""To-do schemas."""
import uuid
from datetime import datetime
from typing import Optional

from .common import BaseSchema


class TodoCreate(BaseSchema):
    todo_name: Optional[str] = None
    todo_desc: Optional[str] = None
    todo_status: Optional[str] = None
    todo_priority: Optional[str] = None
    due_date: Optional[datetime] = None


class TodoUpdate(TodoCreate):
    pass


class TodoResponse(BaseSchema):
    id: uuid.UUID
    user_id: uuid.UUID
    todo_name: str
    todo_desc: str
    todo_status: str
    todo_priority: str
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TodoCreatedResponse(BaseSchema):
    message: str
    newTodo: TodoResponse


class TodoUpdatedResponse(BaseSchema):
    message: str
    updatedTodo: TodoResponse
