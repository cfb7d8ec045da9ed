"""
Business Logic Services
"""
from .ticket_store import TicketStore, TicketNotInStoreError
from .notifications import NotificationLog
from .status_coordinator import PendingUpdate, StatusUpdateCoordinator, StatusUpdateResult
from .drag_adapter import COLUMN_STATUS, DragInteractionAdapter, DropOutcome, DropResult
from .dashboard import DashboardSession
from .ticket_service import AttachmentTooLargeError, AttachmentUpload, TicketService
from .admin_service import AdminService

__all__ = [
    "TicketStore",
    "TicketNotInStoreError",
    "NotificationLog",
    "PendingUpdate",
    "StatusUpdateCoordinator",
    "StatusUpdateResult",
    "COLUMN_STATUS",
    "DragInteractionAdapter",
    "DropOutcome",
    "DropResult",
    "DashboardSession",
    "AttachmentTooLargeError",
    "AttachmentUpload",
    "TicketService",
    "AdminService",
]
