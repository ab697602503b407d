"""Services module."""
from .auth_flow import AuthFlowController, SignInResult, RefreshResult
from .email import EmailSender, SmtpEmailSender, get_email_sender
from .profiles import ProfileService, PROFILE_FIELD_PERMISSIONS
from .todos import TodoService
from .users import UserRepository

__all__ = [
    "AuthFlowController",
    "SignInResult",
    "RefreshResult",
    "EmailSender",
    "SmtpEmailSender",
    "get_email_sender",
    "ProfileService",
    "PROFILE_FIELD_PERMISSIONS",
    "TodoService",
    "UserRepository",
]
