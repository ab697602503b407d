"""To-do item model."""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow


class Todo(Base):
    """A to-do item owned by exactly one user."""

    __tablename__ = "todos"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    todo_name: Mapped[str] = mapped_column(String(255), nullable=False)
    todo_desc: Mapped[str] = mapped_column(Text, default="", nullable=False)
    todo_status: Mapped[str] = mapped_column(String(50), default="active", nullable=False)
    todo_priority: Mapped[str] = mapped_column(String(50), default="low", nullable=False)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    owner: Mapped["User"] = relationship("User", back_populates="todos")

    def __repr__(self) -> str:
        return f"<Todo(name={self.todo_name}, status={self.todo_status})>"
