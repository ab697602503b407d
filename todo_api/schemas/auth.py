"""Account, session and profile schemas.

Request bodies keep every field optional: presence, order of checks and the
resulting messages are decided by the auth flow, not by the parser.
"""
import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from .common import BaseSchema


class SignUpRequest(BaseSchema):
    """Sign-up request schema."""
    
    personal_id: Optional[str] = Field(None, description="National or personal id")
    name: Optional[str] = Field(None, description="Display name")
    email: Optional[str] = Field(None, description="Email address, used to sign in")
    password: Optional[str] = Field(None, description="Password")
    confirmPassword: Optional[str] = Field(None, description="Password confirmation")
    address: Optional[str] = Field(None, description="Postal address")
    phone_number: Optional[str] = Field(None, description="Phone number")


class SignInRequest(BaseSchema):
    """Sign-in request schema."""
    
    email: Optional[str] = Field(None, description="User email")
    password: Optional[str] = Field(None, description="User password")


class VerifyEmailRequest(BaseSchema):
    email: Optional[str] = Field(None, description="User email")
    code: Optional[str] = Field(None, description="Code received by email")


class EmailRequest(BaseSchema):
    """Body for resend-verification and forgot-password."""
    
    email: Optional[str] = Field(None, description="User email")


class ResetPasswordRequest(BaseSchema):
    email: Optional[str] = Field(None, description="User email")
    code: Optional[str] = Field(None, description="Reset code received by email")
    newPassword: Optional[str] = Field(None, description="New password")
    confirmPassword: Optional[str] = Field(None, description="New password confirmation")


class ProfileUpdateRequest(BaseSchema):
    """Partial profile update; which fields apply depends on the caller."""
    
    personal_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    address: Optional[str] = None
    phone_number: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=500)
    user_image: Optional[str] = None


class UserPublic(BaseSchema):
    """Identity subset returned by sign-up and sign-in."""
    
    id: uuid.UUID
    name: str
    email: str


class UserSession(UserPublic):
    """Identity subset returned by token refresh."""
    
    role: str


class UserUpdated(UserSession):
    """Profile fields echoed back after an update."""
    
    bio: str
    address: str
    phone_number: str
    user_image: str


class UserProfile(UserUpdated):
    """Full safe view; never includes password or code fields."""
    
    personal_id: str
    verified: bool
    joined_at: datetime
    updated_at: datetime


class SignUpResponse(BaseSchema):
    message: str
    user: UserPublic


class SignInResponse(BaseSchema):
    message: str
    user: UserPublic
    access_token: str = Field(..., description="JWT access token")


class RefreshResponse(BaseSchema):
    access_token: str = Field(..., description="JWT access token")
    user: UserSession


class ProfileUpdateResponse(BaseSchema):
    message: str
    user: UserUpdated
