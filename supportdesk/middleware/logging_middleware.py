"""
Logging Middleware - Request/Response logging
"""
import time
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)

QUIET_PATHS = ("/api/health",)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all requests and responses

    Logs:
    - Request method, path, client
    - Response status code, duration
    - Errors if any
    """

    async def dispatch(self, request: Request, call_next: Callable):
        """Process and log request/response"""

        # Dashboards poll health; too noisy
        if request.url.path.startswith(QUIET_PATHS):
            return await call_next(request)

        start_time = time.time()
        method = request.method
        path = request.url.path
        client_host = request.client.host if request.client else "unknown"

        logger.info(
            f"→ {method} {path}",
            extra={
                "method": method,
                "path": path,
                "query_params": dict(request.query_params),
                "client": client_host,
            }
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = int((time.time() - start_time) * 1000)
            logger.error(
                f"✗ {method} {path} ERROR ({duration_ms}ms): {str(e)}",
                extra={
                    "method": method,
                    "path": path,
                    "error": str(e),
                    "duration_ms": duration_ms
                },
                exc_info=True
            )
            raise

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"← {method} {path} {response.status_code} ({duration_ms}ms)",
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": duration_ms
            }
        )
        response.headers["X-Process-Time"] = str(duration_ms)
        return response
