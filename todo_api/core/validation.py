"""Input rules shared by sign-up, password reset and profile updates."""
import re
from typing import Any

EMAIL_PATTERN = re.compile(
    r'^(([^<>()\[\]\\.,;:\s@"]+(\.[^<>()\[\]\\.,;:\s@"]+)*)|(".+"))'
    r'@((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\])|(([a-zA-Z\-0-9]+\.)+[a-zA-Z]{2,}))$'
)

# 6-20 characters, at least one digit, one lowercase and one uppercase letter
PASSWORD_PATTERN = re.compile(r"^(?=.*\d)(?=.*[a-z])(?=.*[A-Z]).{6,20}$")

MIN_NAME_LENGTH = 3

# Longest address SMTP can carry; also fits the String(255) column
MAX_EMAIL_LENGTH = 254

MSG_FILL_ALL_FIELDS = "Please fill in all fields"
MSG_NAME_TOO_SHORT = "Your name must be at least 3 letters long"
MSG_PASSWORD_MISMATCH = "Password did not match"
MSG_INVALID_EMAIL = "Invalid email format"
MSG_PASSWORD_POLICY = (
    "Password must be 6-20 characters long and contain at least one number, "
    "one lowercase letter, and one uppercase letter"
)


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def validate_email(email: str) -> bool:
    if len(email) > MAX_EMAIL_LENGTH:
        return False
    return EMAIL_PATTERN.fullmatch(email) is not None


def validate_password(password: str) -> bool:
    return PASSWORD_PATTERN.fullmatch(password) is not None


def passwords_match(password: str, confirm_password: str) -> bool:
    return password == confirm_password
