"""Outbound email delivery."""
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional, Protocol

from starlette.concurrency import run_in_threadpool

from ..config import settings
from ..config.settings import EmailSettings
from ..core.logging import BusinessLogger

logger = logging.getLogger(__name__)

VERIFICATION_SUBJECT = "Verify your Email"
PASSWORD_RESET_SUBJECT = "Password Reset Request"

_CODE_TEMPLATE = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h2 style="color: #333;">{heading}</h2>
  <p>{intro}</p>
  <div style="background-color: #f4f4f4; padding: 10px; border-radius: 5px; text-align: center;">
    <h3 style="margin: 0;">{label}</h3>
    <h2 style="margin: 10px 0; color: #4285f4; letter-spacing: 5px;">{code}</h2>
    <p style="margin: 0; font-size: 12px;">This code will expire in {minutes} minutes</p>
  </div>
  <p>{outro}</p>
  <p>Best regards,<br>Todo App Team</p>
</div>
"""


class EmailSender(Protocol):
    async def send(self, recipient: str, subject: str, body: str) -> bool:
        """Deliver an HTML message; True on success."""
        ...


class SmtpEmailSender:
    """Sends mail through an SMTP relay on the worker thread pool."""

    def __init__(self, config: Optional[EmailSettings] = None):
        self.config = config or settings.email

    async def send(self, recipient: str, subject: str, body: str) -> bool:
        if not self.config.smtp_host:
            logger.warning("Email not sent to %s: SMTP_HOST is not configured", recipient)
            BusinessLogger.log_email_delivery_failed(recipient, subject, "SMTP_HOST not configured")
            return False

        try:
            await run_in_threadpool(self._send_via_smtp, recipient, subject, body)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("SMTP send failed: %s", exc)
            BusinessLogger.log_email_delivery_failed(recipient, subject, str(exc))
            return False
        return True

    def _send_via_smtp(self, recipient: str, subject: str, body: str) -> None:
        msg = EmailMessage()
        msg["From"] = f'"{self.config.from_name}" <{self.config.from_email}>'
        msg["To"] = recipient
        msg["Subject"] = subject
        msg.set_content(body, subtype="html")

        server = smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, timeout=self.config.smtp_timeout)
        try:
            if self.config.smtp_use_tls:
                server.starttls()
            if self.config.smtp_username and self.config.smtp_password:
                server.login(self.config.smtp_username, self.config.smtp_password)
            server.send_message(msg)
        finally:
            try:
                server.quit()
            except smtplib.SMTPException:
                pass


def verification_email_body(code: str) -> str:
    return _CODE_TEMPLATE.format(
        heading="Todo App Email Verification",
        intro=(
            "Thank you for registering with our Todo App. Please verify your "
            "email address to complete the registration process."
        ),
        label="Your verification code is:",
        code=code,
        minutes=settings.auth.verification_code_expire_minutes,
        outro="If you did not request this verification, please ignore this email.",
    )


def password_reset_email_body(code: str) -> str:
    return _CODE_TEMPLATE.format(
        heading="Todo App Password Reset",
        intro=(
            "We received a request to reset your password. Please use the "
            "code below to reset your password:"
        ),
        label="Your reset code is:",
        code=code,
        minutes=settings.auth.verification_code_expire_minutes,
        outro=(
            "If you did not request a password reset, please ignore this email "
            "and your password will remain unchanged."
        ),
    )


def get_email_sender() -> EmailSender:
    """Email sender dependency for FastAPI."""
    return SmtpEmailSender()
