"""User model."""
import enum
from datetime import datetime
from typing import List, Optional

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow

DEFAULT_USER_IMAGE = "https://api.dicebear.com/9.x/big-ears-neutral/svg?seed=Alexander"


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class User(Base):
    """User model for authentication and authorization."""
    
    __tablename__ = "users"
    
    personal_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default=UserRole.USER.value, nullable=False)

    # Profile
    address: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    phone_number: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    bio: Mapped[str] = mapped_column(Text, default="", nullable=False)
    user_image: Mapped[str] = mapped_column(String(1000), default=DEFAULT_USER_IMAGE, nullable=False)

    # Email verification and password reset share one code slot
    verified: Mapped[bool] = mapped_column(default=False, nullable=False)
    verification_code: Mapped[Optional[str]] = mapped_column(String(64))
    verification_expires: Mapped[Optional[datetime]] = mapped_column(DateTime)

    joined_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    todos: Mapped[List["Todo"]] = relationship(
        "Todo",
        back_populates="owner",
        cascade="all, delete-orphan",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
    
    def __repr__(self) -> str:
        return f"<User(email={self.email}, role={self.role})>"
