"""
Admin API Authentication

Simple API key check for the admin dashboard endpoints. The acting admin
is identified by the optional X-Admin-Id header (used as comment author).
"""
import hmac
import logging
from typing import Annotated, Optional

from fastapi import Header, HTTPException, status

from supportdesk.config import get_settings

logger = logging.getLogger(__name__)


def verify_admin_key(
    api_key: Annotated[Optional[str], Header(alias="X-Admin-API-Key")] = None
) -> bool:
    """
    Verify admin API key from request headers.

    Args:
        api_key: API key from X-Admin-API-Key header

    Returns:
        True if valid

    Raises:
        HTTPException: If key invalid or missing
    """
    if not api_key:
        logger.warning("Admin API request missing API key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing admin API key",
            headers={"WWW-Authenticate": "ApiKey"}
        )

    admin_api_key = get_settings().admin_api_key

    if not admin_api_key:
        logger.error("ADMIN_API_KEY not configured! Admin endpoints are disabled.")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Admin authentication not configured"
        )

    if not hmac.compare_digest(api_key.encode("utf-8"), admin_api_key.encode("utf-8")):
        logger.warning("Invalid admin API key attempt")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin API key"
        )

    return True


def current_admin_id(
    admin_id: Annotated[Optional[str], Header(alias="X-Admin-Id")] = None
) -> Optional[str]:
    """Acting admin's id, if the dashboard sent one"""
    return admin_id or None
