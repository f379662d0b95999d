"""Size formatting, MIME guessing, email and signup checks."""

from __future__ import annotations

import mimetypes
import re

from .exceptions import ValidationError

MIN_PASSWORD_LENGTH = 6

DEFAULT_CONTENT_TYPE = "application/octet-stream"

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_size(size_bytes: int) -> str:
    """Human-readable size with 1024-based units.

    Examples:
        format_size(0) -> "0 B"
        format_size(1536) -> "1.5 KB"
        format_size(5 * 1024 * 1024) -> "5 MB"
    """
    if size_bytes <= 0:
        return "0 B"
    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    if unit == 0:
        return f"{size_bytes} B"
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[unit]}"


def guess_content_type(file_name: str) -> str:
    """Guess a MIME type from *file_name*, falling back to octet-stream."""
    mime, _ = mimetypes.guess_type(file_name)
    return mime or DEFAULT_CONTENT_TYPE


def is_valid_email(email: str) -> bool:
    return bool(email) and _EMAIL_RE.match(email.strip()) is not None


def validate_email(email: str) -> str:
    """Return the stripped *email* or raise ``ValidationError``."""
    email = email.strip()
    if not is_valid_email(email):
        raise ValidationError(f"Invalid email address: {email!r}")
    return email


def validate_signup(
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    confirm_password: str,
) -> None:
    """Run the signup form checks, raising ``ValidationError`` on the first failure."""
    if password != confirm_password:
        raise ValidationError("Passwords do not match")
    if not first_name.strip() or not last_name.strip():
        raise ValidationError("First and last name are required")
    validate_email(email)
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
