"""
Status Update Coordinator

Changes one ticket's status with optimistic local state:

1. capture the current status as a PendingUpdate
2. apply the requested status to the store immediately
3. write to the ticket service under a timeout
4. on success adopt the status and updated_at the service returned
5. on failure restore the previous status, report the error and schedule
   a reload, since a timed-out write may still land in the database

Callers must not start a second update for a ticket before the first one
settles; DragInteractionAdapter enforces this for the dashboard.
"""
import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Protocol, Set, Union

from supportdesk.config import get_settings
from supportdesk.models.schemas import Notification, NotificationKind
from supportdesk.models.ticket import StatusUpdateRow, Ticket, TicketStatus
from supportdesk.repositories.base_repository import (
    NotFoundError,
    RejectedError,
    RemoteServiceError,
    UnavailableError,
)
from supportdesk.services.notifications import NotificationSink
from supportdesk.services.ticket_store import TicketStore
from supportdesk.utils.logger import get_logger
from supportdesk.utils.validators import utc_now_iso

logger = get_logger(__name__)
settings = get_settings()

ERROR_MESSAGES = {
    NotFoundError.kind: "Ticket not found",
    RejectedError.kind: "The ticket service refused the change",
    UnavailableError.kind: "Ticket service unavailable, please try again later",
}


class RemoteTicketService(Protocol):
    """The part of the ticket repository the status flow depends on"""

    async def update_status(self, ticket_id: str, status: TicketStatus, updated_at: str) -> List[StatusUpdateRow]:
        ...

    async def list_all(self) -> List[Ticket]:
        ...


@dataclass(frozen=True)
class PendingUpdate:
    """An in-flight status change and the state to restore if it fails"""

    ticket_id: str
    previous_status: TicketStatus
    requested_status: TicketStatus

    def apply(self, store: TicketStore) -> None:
        store.patch(self.ticket_id, status=self.requested_status)

    def rollback(self, store: TicketStore) -> None:
        """Restore the previous status; a ticket dropped from the store meanwhile is left alone"""
        if self.ticket_id in store:
            store.patch(self.ticket_id, status=self.previous_status)


@dataclass
class StatusUpdateResult:
    """Outcome of one status change"""

    ticket_id: str
    requested_status: TicketStatus
    ticket: Optional[Ticket] = None
    error: Optional[RemoteServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_kind(self) -> Optional[str]:
        return None if self.error is None else self.error.kind


class StatusUpdateCoordinator:
    """Optimistic status writes with deterministic rollback"""

    def __init__(
        self,
        store: TicketStore,
        remote: RemoteTicketService,
        notify: NotificationSink,
        *,
        timeout: Optional[float] = None,
        refresh: Optional[Callable[[], Awaitable[object]]] = None,
        refresh_delay: Optional[float] = None
    ):
        """
        Args:
            store: Ticket store shared with the dashboard
            remote: Ticket service performing the write
            notify: Sink for success/error notifications
            timeout: Seconds before a write counts as Unavailable
            refresh: Full reload scheduled after each remote write, successful or not (advisory)
            refresh_delay: Seconds to wait before that reload
        """
        self.store = store
        self.remote = remote
        self.notify = notify
        self.timeout = timeout if timeout is not None else settings.status_update_timeout_seconds
        self.refresh = refresh
        self.refresh_delay = refresh_delay if refresh_delay is not None else settings.refresh_delay_seconds
        self._refresh_tasks: Set[asyncio.Task] = set()

    async def update_status(
        self,
        ticket_id: str,
        new_status: Union[TicketStatus, str]
    ) -> StatusUpdateResult:
        """
        Change a ticket's status

        Args:
            ticket_id: Ticket held by the store
            new_status: Target status

        Returns:
            StatusUpdateResult; failures are reported, never raised

        Raises:
            ValueError: If new_status is not a valid status
        """
        status = TicketStatus(new_status)
        current = self.store.get(ticket_id)
        if current is None:
            error = NotFoundError(f"Ticket {ticket_id} is not loaded", operation="update status")
            self._notify_failure(ticket_id, error)
            return StatusUpdateResult(ticket_id=ticket_id, requested_status=status, error=error)

        pending = PendingUpdate(ticket_id=ticket_id, previous_status=current.status, requested_status=status)
        pending.apply(self.store)
        self.notify(Notification(
            kind=NotificationKind.INFO,
            message=f"Updating ticket status to {status.value}...",
            ticket_id=ticket_id
        ))
        logger.info(f"Ticket {ticket_id}: {pending.previous_status.value} -> {status.value} (pending)")

        try:
            rows = await asyncio.wait_for(
                self.remote.update_status(ticket_id, status, utc_now_iso()),
                timeout=self.timeout
            )
            confirmed = self._confirm(pending, rows)
        except asyncio.TimeoutError:
            error = UnavailableError(
                f"Status update timed out after {self.timeout:g} seconds",
                operation="update status"
            )
            return self._fail(pending, error)
        except RemoteServiceError as e:
            return self._fail(pending, e)
        except Exception:
            pending.rollback(self.store)
            logger.exception(f"Ticket {ticket_id}: unexpected error, status restored")
            raise

        logger.info(f"Ticket {ticket_id}: {confirmed.status.value} confirmed at {confirmed.updated_at}")
        self.notify(Notification(
            kind=NotificationKind.SUCCESS,
            message=f"Ticket {ticket_id} status updated to {confirmed.status.value}",
            ticket_id=ticket_id
        ))
        self._schedule_refresh()
        return StatusUpdateResult(
            ticket_id=ticket_id,
            requested_status=status,
            ticket=self.store.get(ticket_id)
        )

    def _confirm(self, pending: PendingUpdate, rows: List[StatusUpdateRow]) -> StatusUpdateRow:
        """Adopt the server row for the ticket; no matching row means the write did not land"""
        row = next((r for r in rows if r.id == pending.ticket_id), None)
        if row is None:
            raise NotFoundError(
                f"Ticket {pending.ticket_id} not found or not writable",
                operation="update status"
            )
        if pending.ticket_id in self.store:
            self.store.patch(pending.ticket_id, status=row.status, updated_at=row.updated_at)
        else:
            logger.warning(f"Ticket {pending.ticket_id} left the store during its status update")
        return row

    def _fail(self, pending: PendingUpdate, error: RemoteServiceError) -> StatusUpdateResult:
        pending.rollback(self.store)
        logger.warning(
            f"Ticket {pending.ticket_id}: {error.kind} ({error}), "
            f"restored {pending.previous_status.value}"
        )
        self._notify_failure(pending.ticket_id, error)
        self._schedule_refresh()
        return StatusUpdateResult(
            ticket_id=pending.ticket_id,
            requested_status=pending.requested_status,
            ticket=self.store.get(pending.ticket_id),
            error=error
        )

    def _notify_failure(self, ticket_id: str, error: RemoteServiceError) -> None:
        self.notify(Notification(
            kind=NotificationKind.ERROR,
            message="Failed to update ticket status",
            description=f"{ERROR_MESSAGES.get(error.kind, 'Please try again later')}: {error}",
            ticket_id=ticket_id
        ))

    def _schedule_refresh(self) -> None:
        if self.refresh is None:
            return
        task = asyncio.create_task(self._delayed_refresh())
        self._refresh_tasks.add(task)
        task.add_done_callback(self._refresh_tasks.discard)

    async def _delayed_refresh(self) -> None:
        await asyncio.sleep(self.refresh_delay)
        try:
            await self.refresh()
        except RemoteServiceError as e:
            # Advisory reload only; the store already holds a consistent status
            logger.warning(f"Background ticket refresh failed: {e}")

    async def aclose(self) -> None:
        """Cancel scheduled refreshes"""
        for task in list(self._refresh_tasks):
            task.cancel()
        if self._refresh_tasks:
            await asyncio.gather(*self._refresh_tasks, return_exceptions=True)
        self._refresh_tasks.clear()
