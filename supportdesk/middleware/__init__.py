"""
Middleware and request dependencies
"""
from supportdesk.middleware.admin_auth import current_admin_id, verify_admin_key
from supportdesk.middleware.logging_middleware import LoggingMiddleware

__all__ = [
    "LoggingMiddleware",
    "current_admin_id",
    "verify_admin_key",
]
