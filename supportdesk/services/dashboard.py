"""
Admin dashboard session

Wires one TicketStore to the ticket repository through the status
coordinator and the drag adapter, and serves the table/kanban views.
"""
from typing import Optional

from supportdesk.config import get_settings
from supportdesk.models.schemas import (
    DashboardResponse,
    DashboardView,
    TicketFilterParams,
)
from supportdesk.services.drag_adapter import DragInteractionAdapter, DropResult
from supportdesk.services.notifications import NotificationLog
from supportdesk.services.status_coordinator import RemoteTicketService, StatusUpdateCoordinator
from supportdesk.services.ticket_filters import apply_filters, compute_stats, filter_options
from supportdesk.services.ticket_store import TicketStore
from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)
settings = get_settings()


class DashboardSession:
    """Ticket state and status operations for the admin dashboard"""

    def __init__(
        self,
        remote: RemoteTicketService,
        notifications: Optional[NotificationLog] = None,
        *,
        timeout: Optional[float] = None,
        refresh_delay: Optional[float] = None,
        grace_seconds: Optional[float] = None,
        background_refresh: bool = True
    ):
        self.remote = remote
        self.notifications = notifications or NotificationLog(settings.notification_history_size)
        self.store = TicketStore()
        self.coordinator = StatusUpdateCoordinator(
            self.store,
            remote,
            self.notifications,
            timeout=timeout,
            refresh=self.refresh if background_refresh else None,
            refresh_delay=refresh_delay
        )
        self.adapter = DragInteractionAdapter(
            self.store,
            self.coordinator,
            self.notifications,
            grace_seconds=grace_seconds
        )

    async def refresh(self) -> TicketStore:
        """Reload every ticket, keeping local state for tickets with a change in flight"""
        fresh = await self.remote.list_all()
        self.store.replace_all(self.adapter.merge_refresh(fresh))
        logger.info(f"Dashboard refreshed: {len(self.store)} tickets")
        return self.store

    async def ensure_loaded(self) -> TicketStore:
        if not self.store.loaded:
            await self.refresh()
        return self.store

    async def change_status(self, ticket_id: str, status) -> DropResult:
        """Status selector on the table view or ticket page"""
        await self.ensure_loaded()
        return await self.adapter.request_status(ticket_id, status)

    async def drop(self, source_column: Optional[str], dest_column: Optional[str], ticket_id: str) -> DropResult:
        """Kanban drag-and-drop"""
        await self.ensure_loaded()
        return await self.adapter.on_drop(source_column, dest_column, ticket_id)

    def view(self, view: DashboardView, filters: TicketFilterParams) -> DashboardResponse:
        """
        Build the dashboard payload from the current snapshot

        Stats and filter options cover every ticket; the ticket list or
        board reflects the filters.
        """
        snapshot = self.store.snapshot()
        filtered = apply_filters(snapshot, filters)
        response = DashboardResponse(
            view=view,
            stats=compute_stats(snapshot),
            options=filter_options(snapshot),
        )
        if view == DashboardView.KANBAN:
            response.columns = self.adapter.columns(filtered)
        else:
            response.tickets = filtered
        return response

    async def aclose(self) -> None:
        await self.coordinator.aclose()
        self.adapter.release_all()
