"""
Utility functions
"""
from supportdesk.utils.logger import get_logger, setup_logger
from supportdesk.utils.validators import (
    email_domain,
    parse_timestamp,
    sanitize_file_name,
    sanitize_input,
    utc_now_iso,
    validate_email,
)

__all__ = [
    "get_logger",
    "setup_logger",
    "email_domain",
    "parse_timestamp",
    "sanitize_file_name",
    "sanitize_input",
    "utc_now_iso",
    "validate_email",
]
