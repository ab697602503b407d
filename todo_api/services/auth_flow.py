"""Account lifecycle: sign-up, sign-in, email verification, password reset, refresh.

A user moves from pending verification to verified exactly once. Password
reset reuses the same code slot and works in either state. Every check runs
before any write, and the first failing check decides the response.
"""
import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from ..core.auth import (
    PasswordHasher,
    TokenClass,
    TokenError,
    TokenService,
    VerificationCodeGenerator,
    code_generator,
    password_hasher,
    token_service,
)
from ..core.exceptions import (
    AlreadyVerifiedError,
    ConflictError,
    EmailDeliveryError,
    InvalidCredentialsError,
    InvalidOrExpiredCodeError,
    InvalidRefreshTokenError,
    MissingTokenError,
    NeedsVerificationError,
    NotFoundError,
    ValidationError,
)
from ..core.logging import BusinessLogger, SecurityLogger
from ..core.validation import (
    MIN_NAME_LENGTH,
    MSG_FILL_ALL_FIELDS,
    MSG_INVALID_EMAIL,
    MSG_NAME_TOO_SHORT,
    MSG_PASSWORD_MISMATCH,
    MSG_PASSWORD_POLICY,
    is_blank,
    passwords_match,
    validate_email,
    validate_password,
)
from ..models.base import utcnow
from ..models.user import User
from ..schemas.auth import ResetPasswordRequest, SignUpRequest
from .email import (
    PASSWORD_RESET_SUBJECT,
    VERIFICATION_SUBJECT,
    EmailSender,
    password_reset_email_body,
    verification_email_body,
)
from .users import UserRepository

logger = logging.getLogger(__name__)


@dataclass
class SignInResult:
    user: User
    access_token: str
    refresh_token: str


@dataclass
class RefreshResult:
    user: User
    access_token: str


class AuthFlowController:
    """Orchestrates the credential store, hasher, codes, tokens and email."""

    def __init__(
        self,
        db: AsyncSession,
        email_sender: EmailSender,
        *,
        hasher: PasswordHasher = password_hasher,
        codes: VerificationCodeGenerator = code_generator,
        tokens: TokenService = token_service,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.users = UserRepository(db)
        self.email_sender = email_sender
        self.hasher = hasher
        self.codes = codes
        self.tokens = tokens
        self.clock = clock

    async def sign_up(self, payload: SignUpRequest) -> User:
        """Register an unverified user and email them a verification code."""
        required = (
            payload.personal_id,
            payload.name,
            payload.email,
            payload.password,
            payload.confirmPassword,
        )
        if any(is_blank(value) for value in required):
            raise ValidationError(MSG_FILL_ALL_FIELDS)

        if len(payload.name) < MIN_NAME_LENGTH:
            raise ValidationError(MSG_NAME_TOO_SHORT)

        if not passwords_match(payload.password, payload.confirmPassword):
            raise ValidationError(MSG_PASSWORD_MISMATCH)

        if not validate_email(payload.email):
            raise ValidationError(MSG_INVALID_EMAIL)

        if not validate_password(payload.password):
            raise ValidationError(MSG_PASSWORD_POLICY)

        if await self.users.get_by_email(payload.email) is not None:
            raise ConflictError()

        password_hash = await run_in_threadpool(self.hasher.hash_password, payload.password)
        code = self.codes.generate()

        # A concurrent sign-up with the same email loses here with ConflictError
        user = await self.users.create(
            personal_id=payload.personal_id,
            name=payload.name,
            email=payload.email,
            password_hash=password_hash,
            address=payload.address or "",
            phone_number=payload.phone_number or "",
            verification_code=code,
            verification_expires=self.codes.expiry_from(self.clock()),
        )
        BusinessLogger.log_user_registered(str(user.id), user.email)
        BusinessLogger.log_code_issued(str(user.id), "verification")

        # Registration stands even if the email bounces
        if not await self._deliver(user.email, VERIFICATION_SUBJECT, verification_email_body(code)):
            logger.warning("Verification email for new user %s was not delivered", user.id)

        return user

    async def sign_in(
        self,
        email: Optional[str],
        password: Optional[str],
        client_ip: Optional[str] = None
    ) -> SignInResult:
        """Check credentials and issue an access/refresh token pair."""
        if is_blank(email) or is_blank(password):
            raise ValidationError(MSG_FILL_ALL_FIELDS)

        user = await self.users.get_by_email(email)
        if user is None:
            SecurityLogger.log_login_attempt(email, False, client_ip, failure_reason="unknown email")
            raise InvalidCredentialsError()

        if not await run_in_threadpool(self.hasher.verify_password, password, user.password_hash):
            SecurityLogger.log_login_attempt(email, False, client_ip, failure_reason="wrong password")
            raise InvalidCredentialsError()

        if not user.verified:
            SecurityLogger.log_login_attempt(email, False, client_ip, failure_reason="unverified")
            raise NeedsVerificationError(user.email)

        SecurityLogger.log_login_attempt(email, True, client_ip)
        return SignInResult(
            user=user,
            access_token=self.tokens.issue_access(str(user.id), user.role),
            refresh_token=self.tokens.issue_refresh(str(user.id)),
        )

    async def verify_email(self, email: Optional[str], code: Optional[str]) -> User:
        if is_blank(email) or is_blank(code):
            raise ValidationError("Email and verification code are required")

        user = await self._require_user(email)
        if user.verified:
            raise AlreadyVerifiedError()

        if not self._code_matches(user, code):
            raise InvalidOrExpiredCodeError()

        await self.users.mark_verified(user)
        BusinessLogger.log_email_verified(str(user.id))
        return user

    async def resend_verification(self, email: Optional[str]) -> None:
        """Replace the in-flight code and email it; delivery failure is surfaced."""
        if is_blank(email):
            raise ValidationError("Email is required")

        user = await self._require_user(email)
        if user.verified:
            raise AlreadyVerifiedError()

        code = await self._issue_code(user, "verification")
        if not await self._deliver(user.email, VERIFICATION_SUBJECT, verification_email_body(code)):
            raise EmailDeliveryError("Failed to send verification email")

    async def forgot_password(self, email: Optional[str]) -> None:
        """Issue a reset code into the shared code slot and email it."""
        if is_blank(email):
            raise ValidationError("Email is required")

        user = await self._require_user(email)
        code = await self._issue_code(user, "password_reset")
        if not await self._deliver(user.email, PASSWORD_RESET_SUBJECT, password_reset_email_body(code)):
            raise EmailDeliveryError("Failed to send password reset email")

    async def reset_password(self, payload: ResetPasswordRequest) -> User:
        required = (payload.email, payload.code, payload.newPassword, payload.confirmPassword)
        if any(is_blank(value) for value in required):
            raise ValidationError("All fields are required")

        if not passwords_match(payload.newPassword, payload.confirmPassword):
            raise ValidationError("Passwords do not match")

        if not validate_password(payload.newPassword):
            raise ValidationError(MSG_PASSWORD_POLICY)

        user = await self._require_user(payload.email)
        if not self._code_matches(user, payload.code):
            raise InvalidOrExpiredCodeError("Invalid or expired reset code")

        password_hash = await run_in_threadpool(self.hasher.hash_password, payload.newPassword)
        await self.users.set_password(user, password_hash)
        BusinessLogger.log_password_reset(str(user.id))
        return user

    async def refresh(self, refresh_token: Optional[str]) -> RefreshResult:
        """Mint a new access token carrying the role stored right now."""
        if is_blank(refresh_token):
            raise MissingTokenError()

        try:
            claims = self.tokens.verify(refresh_token, TokenClass.REFRESH)
        except TokenError as e:
            logger.info("Refresh token rejected: %s", e)
            raise InvalidRefreshTokenError()

        user = await self.users.get_by_id(claims.id)
        if user is None:
            raise NotFoundError("User does not exist.")

        return RefreshResult(
            user=user,
            access_token=self.tokens.issue_access(str(user.id), user.role),
        )

    async def _require_user(self, email: str) -> User:
        user = await self.users.get_by_email(email)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def _issue_code(self, user: User, purpose: str) -> str:
        code = self.codes.generate()
        await self.users.set_verification_code(user, code, self.codes.expiry_from(self.clock()))
        BusinessLogger.log_code_issued(str(user.id), purpose)
        return code

    def _code_matches(self, user: User, code: str) -> bool:
        """Exact match on the stored code while ``now < expires``."""
        if user.verification_code is None or user.verification_expires is None:
            return False

        expires = user.verification_expires
        if expires.tzinfo is not None:
            expires = expires.astimezone(timezone.utc).replace(tzinfo=None)
        if not self.clock() < expires:
            return False

        return hmac.compare_digest(user.verification_code.encode("utf-8"), code.encode("utf-8"))

    async def _deliver(self, recipient: str, subject: str, body: str) -> bool:
        try:
            return await self.email_sender.send(recipient, subject, body)
        except Exception:
            logger.exception("Email sender raised while sending to %s", recipient)
            return False
