"""User account, session and profile routes."""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...core.security import Identity, admin_required, get_current_identity, self_or_admin
from ...database import get_db
from ...schemas.auth import (
    EmailRequest,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    RefreshResponse,
    ResetPasswordRequest,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    SignUpResponse,
    UserProfile,
    UserPublic,
    UserSession,
    UserUpdated,
    VerifyEmailRequest,
)
from ...schemas.common import ErrorResponse, MessageResponse
from ...services.auth_flow import AuthFlowController
from ...services.email import EmailSender, get_email_sender
from ...services.profiles import ProfileService

router = APIRouter(
    tags=["User"],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


def get_auth_flow(
    db: AsyncSession = Depends(get_db),
    email_sender: EmailSender = Depends(get_email_sender),
) -> AuthFlowController:
    return AuthFlowController(db, email_sender)


def get_profile_service(db: AsyncSession = Depends(get_db)) -> ProfileService:
    return ProfileService(db)


def _set_refresh_cookie(response: Response, refresh_token: str) -> None:
    response.set_cookie(
        key=settings.auth.refresh_cookie_name,
        value=refresh_token,
        max_age=settings.auth.refresh_cookie_max_age,
        path=settings.auth.refresh_cookie_path,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


@router.post("/signup", response_model=SignUpResponse)
async def sign_up(
    payload: Optional[SignUpRequest] = None,
    auth_flow: AuthFlowController = Depends(get_auth_flow),
):
    """Register a new, unverified user."""
    user = await auth_flow.sign_up(payload or SignUpRequest())
    return SignUpResponse(
        message="User registered successfully. Please check your email for verification code.",
        user=UserPublic.model_validate(user),
    )


@router.post("/signin", response_model=SignInResponse)
async def sign_in(
    request: Request,
    response: Response,
    payload: Optional[SignInRequest] = None,
    auth_flow: AuthFlowController = Depends(get_auth_flow),
):
    """Sign in; the refresh token travels only in an HTTP-only cookie."""
    payload = payload or SignInRequest()
    result = await auth_flow.sign_in(
        payload.email,
        payload.password,
        client_ip=request.client.host if request.client else None,
    )
    _set_refresh_cookie(response, result.refresh_token)
    return SignInResponse(
        message="Sign In successfully!",
        user=UserPublic.model_validate(result.user),
        access_token=result.access_token,
    )


@router.post("/verify-email", response_model=MessageResponse)
async def verify_email(
    payload: Optional[VerifyEmailRequest] = None,
    auth_flow: AuthFlowController = Depends(get_auth_flow),
):
    payload = payload or VerifyEmailRequest()
    await auth_flow.verify_email(payload.email, payload.code)
    return MessageResponse(message="Email verified successfully")


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    payload: Optional[EmailRequest] = None,
    auth_flow: AuthFlowController = Depends(get_auth_flow),
):
    await auth_flow.resend_verification((payload or EmailRequest()).email)
    return MessageResponse(message="Verification code sent successfully")


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    payload: Optional[EmailRequest] = None,
    auth_flow: AuthFlowController = Depends(get_auth_flow),
):
    await auth_flow.forgot_password((payload or EmailRequest()).email)
    return MessageResponse(message="Password reset instructions sent to your email")


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    payload: Optional[ResetPasswordRequest] = None,
    auth_flow: AuthFlowController = Depends(get_auth_flow),
):
    await auth_flow.reset_password(payload or ResetPasswordRequest())
    return MessageResponse(message="Password reset successfully")


@router.post("/refresh_token", response_model=RefreshResponse)
async def refresh_token(
    request: Request,
    auth_flow: AuthFlowController = Depends(get_auth_flow),
):
    """Issue a new access token from the refresh cookie."""
    result = await auth_flow.refresh(request.cookies.get(settings.auth.refresh_cookie_name))
    return RefreshResponse(
        access_token=result.access_token,
        user=UserSession.model_validate(result.user),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    """Clear the refresh cookie (the token itself stays valid until expiry)."""
    response.delete_cookie(
        key=settings.auth.refresh_cookie_name,
        path=settings.auth.refresh_cookie_path,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return MessageResponse(message="Logged out successfully!")


@router.get("/user-infor", response_model=UserProfile)
async def user_info(
    identity: Identity = Depends(get_current_identity),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Get the caller's own profile."""
    user = await profiles.get_profile(identity.id)
    return UserProfile.model_validate(user)


@router.get("/users", response_model=List[UserProfile])
async def list_users(
    identity: Identity = Depends(admin_required),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Get all users (admin only)."""
    users = await profiles.list_users()
    return [UserProfile.model_validate(user) for user in users]


@router.patch("/users/{user_id}", response_model=ProfileUpdateResponse)
async def update_user(
    user_id: uuid.UUID,
    payload: Optional[ProfileUpdateRequest] = None,
    identity: Identity = Depends(self_or_admin),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Update a profile (owner or admin); non-admins cannot change email or role."""
    requested = payload.model_dump(exclude_unset=True) if payload else {}
    user = await profiles.update_user(identity, str(user_id), requested)
    return ProfileUpdateResponse(
        message="Profile updated successfully",
        user=UserUpdated.model_validate(user),
    )


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: uuid.UUID,
    identity: Identity = Depends(admin_required),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Delete a user and their to-dos (admin only)."""
    await profiles.delete_user(identity, str(user_id))
    return MessageResponse(message="User deleted successfully")
