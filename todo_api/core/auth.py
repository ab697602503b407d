"""Authentication primitives: password hashing, verification codes, tokens."""
import enum
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from ..config import settings
from ..models.user import UserRole

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72


def _pwd_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class PasswordHasher:
    """One-way salted password hashing with bcrypt."""

    def __init__(self, rounds: Optional[int] = None):
        self.rounds = rounds or settings.auth.bcrypt_rounds

    def hash_password(self, password: str) -> str:
        """Hash password with a fresh salt; the salt is embedded in the result."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_pwd_bytes(password), salt).decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify password against hash. A malformed hash is a mismatch."""
        try:
            return bcrypt.checkpw(
                _pwd_bytes(plain_password),
                hashed_password.encode("utf-8")
            )
        except (ValueError, TypeError, AttributeError):
            return False


class VerificationCodeGenerator:
    """Short random codes for email verification and password reset."""

    def __init__(
        self,
        num_bytes: Optional[int] = None,
        lifetime: Optional[timedelta] = None
    ):
        self.num_bytes = num_bytes or settings.auth.verification_code_bytes
        self.lifetime = lifetime or timedelta(
            minutes=settings.auth.verification_code_expire_minutes
        )

    def generate(self) -> str:
        return secrets.token_hex(self.num_bytes)

    def expiry_from(self, now: datetime) -> datetime:
        return now + self.lifetime


class TokenClass(str, enum.Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class TokenError(Exception):
    """Token could not be verified."""


class TokenExpiredError(TokenError):
    """Token signature is valid but its expiry has passed."""


class TokenInvalidError(TokenError):
    """Token is malformed, tampered with, or of the wrong class."""


@dataclass(frozen=True)
class TokenClaims:
    """Verified token payload."""

    id: str
    token_class: TokenClass
    role: Optional[str] = None


class TokenService:
    """Issues and verifies access and refresh JWTs.

    Each token class is signed with its own secret, so a leaked refresh
    secret cannot mint access tokens and vice versa. The ``type`` claim is
    checked as well.
    """

    def __init__(
        self,
        access_secret: Optional[str] = None,
        refresh_secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        access_lifetime: Optional[timedelta] = None,
        refresh_lifetime: Optional[timedelta] = None,
    ):
        self.access_secret = access_secret or settings.auth.access_token_secret
        self.refresh_secret = refresh_secret or settings.auth.refresh_token_secret
        self.algorithm = algorithm or settings.auth.algorithm
        self.access_lifetime = access_lifetime or timedelta(
            minutes=settings.auth.access_token_expire_minutes
        )
        self.refresh_lifetime = refresh_lifetime or timedelta(
            days=settings.auth.refresh_token_expire_days
        )

    def _secret_for(self, token_class: TokenClass) -> str:
        if token_class is TokenClass.ACCESS:
            return self.access_secret
        return self.refresh_secret

    def _encode(
        self,
        data: dict,
        token_class: TokenClass,
        expires_delta: timedelta
    ) -> str:
        now = datetime.now(timezone.utc)
        to_encode = data.copy()
        to_encode.update({
            "type": token_class.value,
            "iat": now,
            "exp": now + expires_delta,
        })
        return jwt.encode(to_encode, self._secret_for(token_class), algorithm=self.algorithm)

    def issue_access(
        self,
        user_id: str,
        role: str,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """Create JWT access token carrying identity and role."""
        return self._encode(
            {"id": str(user_id), "role": role},
            TokenClass.ACCESS,
            expires_delta or self.access_lifetime,
        )

    def issue_refresh(
        self,
        user_id: str,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """Create JWT refresh token carrying identity only."""
        return self._encode(
            {"id": str(user_id)},
            TokenClass.REFRESH,
            expires_delta or self.refresh_lifetime,
        )

    def verify(self, token: str, token_class: TokenClass) -> TokenClaims:
        """Verify and decode a token of the given class."""
        try:
            payload = jwt.decode(
                token, self._secret_for(token_class), algorithms=[self.algorithm]
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError(str(e)) from e
        except JWTError as e:
            raise TokenInvalidError(str(e)) from e

        if payload.get("type") != token_class.value:
            raise TokenInvalidError("Unexpected token type")

        user_id = payload.get("id")
        if not isinstance(user_id, str) or not user_id:
            raise TokenInvalidError("Token carries no identity")

        role = payload.get("role")
        if token_class is TokenClass.ACCESS and role not in {r.value for r in UserRole}:
            raise TokenInvalidError("Token carries no valid role")

        return TokenClaims(id=user_id, token_class=token_class, role=role)


# Global instances
password_hasher = PasswordHasher()
code_generator = VerificationCodeGenerator()
token_service = TokenService()
