"""Pydantic schemas module."""
from .auth import (
    SignUpRequest,
    SignInRequest,
    VerifyEmailRequest,
    EmailRequest,
    ResetPasswordRequest,
    ProfileUpdateRequest,
    UserPublic,
    UserSession,
    UserUpdated,
    UserProfile,
    SignUpResponse,
    SignInResponse,
    RefreshResponse,
    ProfileUpdateResponse,
)
from .todo import (
    TodoCreate,
    TodoUpdate,
    TodoResponse,
    TodoCreatedResponse,
    TodoUpdatedResponse,
)
from .common import (
    MessageResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    # Auth
    "SignUpRequest",
    "SignInRequest",
    "VerifyEmailRequest",
    "EmailRequest",
    "ResetPasswordRequest",
    "ProfileUpdateRequest",
    "UserPublic",
    "UserSession",
    "UserUpdated",
    "UserProfile",
    "SignUpResponse",
    "SignInResponse",
    "RefreshResponse",
    "ProfileUpdateResponse",
    # Todo
    "TodoCreate",
    "TodoUpdate",
    "TodoResponse",
    "TodoCreatedResponse",
    "TodoUpdatedResponse",
    # Common
    "MessageResponse",
    "ErrorResponse",
    "HealthResponse",
]
