"""To-do routes; every operation is scoped to the authenticated caller."""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.security import Identity, get_current_identity
from ...database import get_db
from ...schemas.common import ErrorResponse, MessageResponse
from ...schemas.todo import (
    TodoCreate,
    TodoCreatedResponse,
    TodoResponse,
    TodoUpdate,
    TodoUpdatedResponse,
)
from ...services.todos import TodoService

router = APIRouter(
    tags=["Todo"],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


def get_todo_service(db: AsyncSession = Depends(get_db)) -> TodoService:
    return TodoService(db)


@router.get("/get_all", response_model=List[TodoResponse])
async def get_all_todos(
    identity: Identity = Depends(get_current_identity),
    todos: TodoService = Depends(get_todo_service),
):
    items = await todos.list_for(uuid.UUID(identity.id))
    return [TodoResponse.model_validate(todo) for todo in items]


@router.post("/add_todo", response_model=TodoCreatedResponse)
async def add_todo(
    payload: Optional[TodoCreate] = None,
    identity: Identity = Depends(get_current_identity),
    todos: TodoService = Depends(get_todo_service),
):
    todo = await todos.create(uuid.UUID(identity.id), payload or TodoCreate())
    return TodoCreatedResponse(
        message="Create a to do list successfully!",
        newTodo=TodoResponse.model_validate(todo),
    )


@router.patch("/update_todo/{todo_id}", response_model=TodoUpdatedResponse)
async def update_todo(
    todo_id: uuid.UUID,
    payload: Optional[TodoUpdate] = None,
    identity: Identity = Depends(get_current_identity),
    todos: TodoService = Depends(get_todo_service),
):
    todo = await todos.update(uuid.UUID(identity.id), todo_id, payload or TodoUpdate())
    return TodoUpdatedResponse(
        message="To-do updated successfully!",
        updatedTodo=TodoResponse.model_validate(todo),
    )


@router.delete("/delete_todo/{todo_id}", response_model=MessageResponse)
async def delete_todo(
    todo_id: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    todos: TodoService = Depends(get_todo_service),
):
    await todos.delete(uuid.UUID(identity.id), todo_id)
    return MessageResponse(message="To-do deleted successfully!")
