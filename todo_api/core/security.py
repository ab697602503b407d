"""Request authentication and role-based authorization dependencies."""
import uuid
from dataclasses import dataclass
from typing import Iterable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..models.user import UserRole
from .auth import TokenClass, TokenExpiredError, TokenError, token_service
from .exceptions import AuthenticationError, AuthorizationError, TokenExpiredAuthenticationError
from .logging import SecurityLogger

# Security scheme; errors are raised by get_current_identity instead
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, reconstructed from the access token."""

    id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


def _reject(request: Request, exc: AuthenticationError) -> AuthenticationError:
    SecurityLogger.log_unauthorized_access(
        path=str(request.url.path),
        method=request.method,
        ip_address=request.client.host if request.client else None,
        reason=exc.message,
    )
    return exc


async def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Identity:
    """Authenticate the bearer access token and attach the caller to the request."""
    if credentials is None:
        if not request.headers.get("authorization"):
            raise _reject(request, AuthenticationError("No authentication token provided"))
        raise _reject(request, AuthenticationError("Invalid token format"))

    token = (credentials.credentials or "").strip()
    if not token:
        raise _reject(request, AuthenticationError("Invalid token format"))

    try:
        claims = token_service.verify(token, TokenClass.ACCESS)
    except TokenExpiredError:
        raise _reject(request, TokenExpiredAuthenticationError())
    except TokenError:
        raise _reject(request, AuthenticationError("Invalid token"))

    try:
        uuid.UUID(claims.id)
    except ValueError:
        raise _reject(request, AuthenticationError("Invalid token"))

    identity = Identity(id=claims.id, role=claims.role)
    request.state.user = identity
    return identity


def _same_id(raw: Optional[str], identity_id: str) -> bool:
    if raw is None:
        return False
    try:
        return uuid.UUID(str(raw)) == uuid.UUID(identity_id)
    except ValueError:
        return False


class RoleChecker:
    """Require one of ``allowed_roles``.

    When ``owner_param`` names a path parameter, a caller whose id equals that
    parameter passes regardless of role. The bypass is opt-in per route.
    """

    def __init__(self, allowed_roles: Iterable[str], owner_param: Optional[str] = None):
        self.allowed_roles = frozenset(allowed_roles)
        self.owner_param = owner_param

    def __call__(
        self,
        request: Request,
        identity: Identity = Depends(get_current_identity),
    ) -> Identity:
        if identity.role in self.allowed_roles:
            return identity

        if self.owner_param and _same_id(request.path_params.get(self.owner_param), identity.id):
            return identity

        SecurityLogger.log_unauthorized_access(
            path=str(request.url.path),
            method=request.method,
            ip_address=request.client.host if request.client else None,
            reason=f"role {identity.role} not in {sorted(self.allowed_roles)}",
        )
        raise AuthorizationError()


# Common role checkers
admin_required = RoleChecker([UserRole.ADMIN.value])
self_or_admin = RoleChecker([UserRole.ADMIN.value], owner_param="user_id")
