"""
Input validation utilities
"""
import re
from datetime import datetime, timezone
from typing import Any

from dateutil import parser as date_parser

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


def validate_email(email: str) -> bool:
    """
    Validate email format

    Args:
        email: Email address to validate

    Returns:
        True if valid email format
    """
    return re.match(EMAIL_PATTERN, email or "") is not None


def email_domain(email: str) -> str:
    """Return the lowercase domain part of an email, or empty string"""
    if not email or "@" not in email:
        return ""
    return email.rsplit("@", 1)[1].lower()


def sanitize_input(text: str, max_length: int = 10000) -> str:
    """
    Sanitize user input

    Args:
        text: Input text to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    # Remove null bytes
    text = text.replace('\x00', '')

    # Truncate to max length
    if len(text) > max_length:
        text = text[:max_length]

    return text.strip()


def sanitize_file_name(file_name: str) -> str:
    """
    Make an uploaded file name safe for use as a storage object key

    Path separators are dropped and anything outside a conservative
    character set is replaced with an underscore.
    """
    base = (file_name or "").replace("\\", "/").rsplit("/", 1)[-1]
    base = re.sub(r"[^A-Za-z0-9._-]", "_", base).strip("._")
    return base or "attachment"


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a timestamp returned by the database into an aware datetime

    Naive values are interpreted as UTC.

    Raises:
        ValueError: If the value is missing or not a timestamp
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = date_parser.isoparse(value.strip())
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Invalid timestamp: {value!r}") from e
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string"""
    return datetime.now(timezone.utc).isoformat()
