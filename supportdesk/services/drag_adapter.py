"""
Drag-Interaction Adapter

Turns kanban drops into status changes. Each ticket is either Idle or
Pending; a ticket stays Pending from the drop until the coordinator settles
plus a short grace period, because the reload triggered by the same change
can land just after it. While Pending:

- another status change for the ticket is refused as busy (never queued)
- a full reload keeps the local copy of the ticket instead of the listed row
"""
import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Union

from supportdesk.config import get_settings
from supportdesk.models.schemas import Notification, NotificationKind
from supportdesk.models.ticket import Ticket, TicketStatus
from supportdesk.services.notifications import NotificationSink
from supportdesk.services.status_coordinator import StatusUpdateCoordinator, StatusUpdateResult
from supportdesk.services.ticket_store import TicketStore
from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)
settings = get_settings()

COLUMN_STATUS: Dict[str, TicketStatus] = {
    "open-column": TicketStatus.OPEN,
    "in-progress-column": TicketStatus.IN_PROGRESS,
    "closed-column": TicketStatus.CLOSED,
}
STATUS_COLUMN: Dict[TicketStatus, str] = {status: column for column, status in COLUMN_STATUS.items()}


class DropOutcome(str, Enum):
    """What happened to a drop or status request"""
    IGNORED = "ignored"
    UPDATED = "updated"
    FAILED = "failed"
    BUSY = "busy"


@dataclass
class DropResult:
    """Outcome of a drop with the coordinator result when one ran"""

    outcome: DropOutcome
    ticket_id: str
    update: Optional[StatusUpdateResult] = None

    @property
    def ticket(self) -> Optional[Ticket]:
        return self.update.ticket if self.update else None


class DragInteractionAdapter:
    """Kanban drop handling with a mandatory per-ticket pending guard"""

    def __init__(
        self,
        store: TicketStore,
        coordinator: StatusUpdateCoordinator,
        notify: NotificationSink,
        *,
        grace_seconds: Optional[float] = None
    ):
        self.store = store
        self.coordinator = coordinator
        self.notify = notify
        self.grace_seconds = grace_seconds if grace_seconds is not None else settings.drag_grace_seconds
        self._pending: Set[str] = set()
        self._release_handles: Dict[str, asyncio.TimerHandle] = {}

    @property
    def pending_ids(self) -> FrozenSet[str]:
        return frozenset(self._pending)

    def is_pending(self, ticket_id: str) -> bool:
        return ticket_id in self._pending

    async def on_drop(
        self,
        source_column: Optional[str],
        dest_column: Optional[str],
        ticket_id: str
    ) -> DropResult:
        """
        Handle a card dropped on a column

        Args:
            source_column: Column the card was dragged from
            dest_column: Column it was dropped on (None when outside any column)
            ticket_id: Dragged ticket

        Returns:
            DropResult; dropping on the same column, outside the board or on
            an unknown column is ignored without touching the store
        """
        if dest_column is None or source_column == dest_column:
            return DropResult(DropOutcome.IGNORED, ticket_id)

        target = COLUMN_STATUS.get(dest_column)
        if target is None:
            logger.debug(f"Drop of {ticket_id} on unknown column {dest_column!r} ignored")
            return DropResult(DropOutcome.IGNORED, ticket_id)

        logger.info(f"Drag-and-drop: ticket {ticket_id} {source_column} -> {dest_column}")
        return await self.request_status(ticket_id, target)

    async def request_status(self, ticket_id: str, status: Union[TicketStatus, str]) -> DropResult:
        """
        Change a ticket's status under the pending guard

        Used for drops and for the status selector so both paths share one
        guard per ticket.
        """
        target = TicketStatus(status)
        ticket = self.store.get(ticket_id)
        if ticket is None:
            logger.warning(f"Status request for unknown ticket {ticket_id} ignored")
            return DropResult(DropOutcome.IGNORED, ticket_id)
        if ticket.status == target:
            return DropResult(DropOutcome.IGNORED, ticket_id)

        if ticket_id in self._pending:
            self.notify(Notification(
                kind=NotificationKind.ERROR,
                message="Ticket is still being updated",
                description="Wait for the previous change to finish, then try again",
                ticket_id=ticket_id
            ))
            return DropResult(DropOutcome.BUSY, ticket_id)

        self._hold(ticket_id)
        try:
            result = await self.coordinator.update_status(ticket_id, target)
        finally:
            self._release_later(ticket_id)

        outcome = DropOutcome.UPDATED if result.ok else DropOutcome.FAILED
        return DropResult(outcome, ticket_id, update=result)

    def columns(self, tickets: Optional[Iterable[Ticket]] = None) -> Dict[str, List[Ticket]]:
        """
        Board layout: column id to tickets in display order

        Args:
            tickets: Tickets to lay out (defaults to the whole store)
        """
        board: Dict[str, List[Ticket]] = {column: [] for column in COLUMN_STATUS}
        for ticket in self.store if tickets is None else tickets:
            board[STATUS_COLUMN[ticket.status]].append(ticket)
        return board

    def merge_refresh(self, fresh: Iterable[Ticket]) -> List[Ticket]:
        """
        Combine a full listing with local state for pending tickets

        Pending tickets keep their local entry so stale rows do not move
        cards back while the local state is still authoritative.
        """
        merged: List[Ticket] = []
        for ticket in fresh:
            local = self.store.get(ticket.id) if ticket.id in self._pending else None
            merged.append(local or ticket)
        return merged

    def _hold(self, ticket_id: str) -> None:
        handle = self._release_handles.pop(ticket_id, None)
        if handle is not None:
            handle.cancel()
        self._pending.add(ticket_id)

    def _release_later(self, ticket_id: str) -> None:
        if self.grace_seconds <= 0:
            self._release(ticket_id)
            return
        loop = asyncio.get_running_loop()
        self._release_handles[ticket_id] = loop.call_later(self.grace_seconds, self._release, ticket_id)

    def _release(self, ticket_id: str) -> None:
        self._release_handles.pop(ticket_id, None)
        self._pending.discard(ticket_id)

    def release_all(self) -> None:
        """Clear every pending flag (session teardown)"""
        for handle in self._release_handles.values():
            handle.cancel()
        self._release_handles.clear()
        self._pending.clear()
