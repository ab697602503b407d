"""Custom exceptions for the application.

Every exception renders as a flat JSON object: ``{"message": ...}`` with any
``details`` merged in at the top level.
"""


class BaseAPIException(Exception):
    """Base exception for API errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = None,
        details: dict = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message, **self.details}


class ValidationError(BaseAPIException):
    """Malformed or missing input."""

    def __init__(self, message: str = "Validation failed", details: dict = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details
        )


class ConflictError(BaseAPIException):
    """Resource conflict error (duplicate email)."""

    def __init__(self, message: str = "This email is already registered", details: dict = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="CONFLICT_ERROR",
            details=details
        )


class InvalidCredentialsError(BaseAPIException):
    """Unknown email or wrong password; the two are indistinguishable."""

    def __init__(self, message: str = "Invalid Credentials"):
        super().__init__(
            message=message,
            status_code=400,
            error_code="INVALID_CREDENTIALS"
        )


class NeedsVerificationError(BaseAPIException):
    """Correct credentials for an account whose email is not verified yet."""

    def __init__(self, email: str, message: str = "Please verify your email before signing in"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="NEEDS_VERIFICATION",
            details={"needsVerification": True, "email": email}
        )


class AlreadyVerifiedError(BaseAPIException):
    """Verification requested for an account that is already verified."""

    def __init__(self, message: str = "Email is already verified"):
        super().__init__(
            message=message,
            status_code=400,
            error_code="ALREADY_VERIFIED"
        )


class InvalidOrExpiredCodeError(BaseAPIException):
    """Wrong code or timed-out code, deliberately not told apart."""

    def __init__(self, message: str = "Invalid or expired verification code"):
        super().__init__(
            message=message,
            status_code=400,
            error_code="INVALID_OR_EXPIRED_CODE"
        )


class MissingTokenError(BaseAPIException):
    """Refresh requested without a usable refresh token."""

    def __init__(self, message: str = "Please login now!"):
        super().__init__(
            message=message,
            status_code=400,
            error_code="MISSING_TOKEN"
        )


class InvalidRefreshTokenError(BaseAPIException):
    """Refresh token failed verification."""

    def __init__(self, message: str = "Please login now!"):
        super().__init__(
            message=message,
            status_code=400,
            error_code="INVALID_TOKEN"
        )


class AuthenticationError(BaseAPIException):
    """Authentication error."""

    def __init__(self, message: str = "Authentication failed", details: dict = None):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTHENTICATION_ERROR",
            details=details
        )


class TokenExpiredAuthenticationError(AuthenticationError):
    """Access token past its expiry; clients react by refreshing."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message=message)
        self.error_code = "TOKEN_EXPIRED"


class AuthorizationError(BaseAPIException):
    """Authorization error."""

    def __init__(self, message: str = "Access denied. Insufficient permissions.", details: dict = None):
        super().__init__(
            message=message,
            status_code=403,
            error_code="AUTHORIZATION_ERROR",
            details=details
        )


class NotFoundError(BaseAPIException):
    """Resource not found error."""

    def __init__(self, message: str = "User not found", details: dict = None):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND_ERROR",
            details=details
        )


class PayloadTooLarge(BaseAPIException):
    """Request body over the configured limit."""

    def __init__(self, message: str = "Request body too large"):
        super().__init__(
            message=message,
            status_code=413,
            error_code="PAYLOAD_TOO_LARGE"
        )


class RateLimitExceeded(BaseAPIException):
    """Rate limit exceeded error."""

    def __init__(self, message: str = "Too many requests from this IP, please try again later", details: dict = None):
        super().__init__(
            message=message,
            status_code=429,
            error_code="RATE_LIMIT_EXCEEDED",
            details=details
        )


class EmailDeliveryError(BaseAPIException):
    """Outbound email could not be delivered."""

    def __init__(self, message: str = "Failed to send email"):
        super().__init__(
            message=message,
            status_code=500,
            error_code="EMAIL_DELIVERY_FAILED"
        )


class InternalError(BaseAPIException):
    """Catch-all for unexpected failures."""

    def __init__(self, message: str = "Internal server error", details: dict = None):
        super().__init__(
            message=message,
            status_code=500,
            error_code="INTERNAL_ERROR",
            details=details
        )
