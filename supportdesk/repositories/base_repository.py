"""
Base Repository

Shared Supabase access for the ticket, comment and admin repositories.
The Supabase client is synchronous; every query runs in a worker thread
under a client-side timeout so the event loop never blocks on the network.
"""
import asyncio
import logging
from typing import Any, Callable, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from supportdesk.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# PostgREST: `.single()` matched no rows
NO_ROWS_CODE = "PGRST116"


class RemoteServiceError(RuntimeError):
    """Base error for failed calls to the hosted database"""

    kind = "Unavailable"

    def __init__(self, message: str, *, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


class NotFoundError(RemoteServiceError):
    """Record unknown to the remote service"""

    kind = "NotFound"


class RejectedError(RemoteServiceError):
    """Write or read refused by the remote service (authorization, validation, bad data)"""

    kind = "Rejected"


class UnavailableError(RemoteServiceError):
    """Transport failure or timeout talking to the remote service"""

    kind = "Unavailable"


class BaseRepository:
    """
    Base repository class for Supabase-backed tables.

    All repositories inherit from this class so that timeouts and
    error translation behave the same everywhere.
    """

    table_name: str = ""

    def __init__(self, supabase_client: Optional[Client] = None, timeout: Optional[float] = None):
        """
        Initialize repository with a Supabase client

        Args:
            supabase_client: Supabase client instance (created from settings if None)
            timeout: Per-query timeout in seconds
        """
        if supabase_client is None:
            self.client = create_client(
                settings.supabase_url,
                settings.supabase_admin_key
            )
        else:
            self.client = supabase_client

        self.timeout = timeout if timeout is not None else settings.status_update_timeout_seconds

    async def _execute(self, operation: str, query: Callable[[], Any]) -> Any:
        """
        Run a blocking Supabase query and translate its failures.

        Args:
            operation: Description used in logs and error messages
            query: Zero-argument callable performing the request

        Returns:
            The query response

        Raises:
            NotFoundError, RejectedError, UnavailableError
        """
        try:
            return await asyncio.wait_for(asyncio.to_thread(query), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Repository timeout during {operation} after {self.timeout}s")
            raise UnavailableError(
                f"Request timed out after {self.timeout:g} seconds",
                operation=operation
            ) from e
        except APIError as e:
            self._handle_error(operation, e)
        except (httpx.TransportError, ConnectionError) as e:
            logger.error(f"Repository transport error during {operation}: {e}")
            raise UnavailableError(f"Service unavailable: {e}", operation=operation) from e

    def _handle_error(self, operation: str, error: APIError):
        """
        Translate a PostgREST error into the repository error taxonomy.

        Raises:
            NotFoundError: The request matched no rows
            RejectedError: Any other refusal
        """
        logger.error(f"Repository error during {operation}: {error.code} {error.message}")
        if error.code == NO_ROWS_CODE:
            raise NotFoundError(f"{operation}: record not found", operation=operation) from error
        raise RejectedError(
            f"{operation}: {error.message or 'request rejected'}",
            operation=operation
        ) from error
