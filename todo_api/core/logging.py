"""Logging configuration and utilities."""
import logging
import sys
from typing import Any, Dict, Optional

import structlog
from structlog.stdlib import LoggerFactory

from ..config import settings

# Never logged, whatever a caller passes in extra data
REDACTED_KEYS = frozenset({"password", "confirmPassword", "newPassword", "code", "authorization", "cookie"})


def _redact(_, __, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    for key in REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def configure_logging():
    """Configure structured logging.

    Production emits one JSON object per line; every other environment gets
    the human readable console renderer.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.is_production
        else structlog.dev.ConsoleRenderer()
    )

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            _redact,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure standard logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.monitoring.log_level.upper(), logging.INFO),
    )

    # Third-party noise
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(name).setLevel(logging.WARNING)


class RequestLogger:
    """One line when a request starts and one when it completes."""

    @staticmethod
    def log_request(method: str, path: str, request_id: str, client_ip: Optional[str] = None):
        structlog.get_logger("todo_api.request").info(
            "Request started",
            method=method,
            path=path,
            request_id=request_id,
            client_ip=client_ip
        )

    @staticmethod
    def log_response(
        method: str,
        path: str,
        status_code: int,
        response_time_ms: float,
        request_id: str,
        user_id: Optional[str] = None
    ):
        logger = structlog.get_logger("todo_api.request")
        log = logger.warning if status_code >= 500 else logger.info
        log(
            "Request completed",
            method=method,
            path=path,
            status_code=status_code,
            response_time_ms=round(response_time_ms, 2),
            request_id=request_id,
            user_id=user_id
        )


class BusinessLogger:
    """Account lifecycle event logging utility."""

    @staticmethod
    def log_user_registered(user_id: str, email: str):
        logger = structlog.get_logger("todo_api.account")
        logger.info(
            "User registered",
            event_type="user_registered",
            user_id=user_id,
            email=email
        )

    @staticmethod
    def log_code_issued(user_id: str, purpose: str):
        """Log a verification or reset code being issued (never the code itself)."""
        logger = structlog.get_logger("todo_api.account")
        logger.info(
            "Code issued",
            event_type="code_issued",
            user_id=user_id,
            purpose=purpose
        )

    @staticmethod
    def log_email_verified(user_id: str):
        logger = structlog.get_logger("todo_api.account")
        logger.info("Email verified", event_type="email_verified", user_id=user_id)

    @staticmethod
    def log_password_reset(user_id: str):
        logger = structlog.get_logger("todo_api.account")
        logger.info("Password reset", event_type="password_reset", user_id=user_id)

    @staticmethod
    def log_email_delivery_failed(recipient: str, subject: str, error_message: str = None):
        logger = structlog.get_logger("todo_api.email")
        logger.error(
            "Email delivery failed",
            event_type="email_delivery_failed",
            recipient=recipient,
            subject=subject,
            error_message=error_message
        )

    @staticmethod
    def log_user_updated(user_id: str, updated_by: str, fields: list[str]):
        logger = structlog.get_logger("todo_api.account")
        logger.info(
            "User updated",
            event_type="user_updated",
            user_id=user_id,
            updated_by=updated_by,
            fields=fields
        )

    @staticmethod
    def log_user_deleted(user_id: str, deleted_by: str):
        logger = structlog.get_logger("todo_api.account")
        logger.warning(
            "User deleted",
            event_type="user_deleted",
            user_id=user_id,
            deleted_by=deleted_by
        )


class SecurityLogger:
    """Sign-in outcomes, rejected credentials and throttled clients."""

    @staticmethod
    def log_login_attempt(
        email: str,
        success: bool,
        ip_address: Optional[str] = None,
        failure_reason: Optional[str] = None
    ):
        # Failure reasons stay server side; clients only see "Invalid Credentials"
        logger = structlog.get_logger("todo_api.security")
        log = logger.info if success else logger.warning
        log(
            "Sign-in succeeded" if success else "Sign-in failed",
            event_type="login_attempt",
            email=email,
            success=success,
            ip_address=ip_address,
            failure_reason=failure_reason
        )

    @staticmethod
    def log_unauthorized_access(
        path: str,
        method: str,
        ip_address: Optional[str] = None,
        reason: Optional[str] = None
    ):
        structlog.get_logger("todo_api.security").warning(
            "Request rejected",
            event_type="unauthorized_access",
            path=path,
            method=method,
            ip_address=ip_address,
            reason=reason
        )

    @staticmethod
    def log_rate_limit_exceeded(ip_address: str, path: str):
        structlog.get_logger("todo_api.security").warning(
            "Rate limit exceeded",
            event_type="rate_limit_exceeded",
            ip_address=ip_address,
            path=path
        )
