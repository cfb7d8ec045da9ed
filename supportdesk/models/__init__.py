"""
Pydantic models for SupportDesk
"""

from supportdesk.models.ticket import (
    StatusUpdateRow,
    Ticket,
    TicketAttachment,
    TicketCategory,
    TicketCreate,
    TicketStatus,
)
from supportdesk.models.schemas import (
    ANONYMOUS_USER_ID,
    AdminLogin,
    AdminProfile,
    AdminSignup,
    CommentCreate,
    DashboardResponse,
    DashboardView,
    DropRequest,
    FilterOptions,
    Notification,
    NotificationKind,
    StatusChangeRequest,
    StatusChangeResponse,
    TicketComment,
    TicketFilterParams,
    TicketStats,
    UserType,
)

__all__ = [
    # Tickets
    "StatusUpdateRow",
    "Ticket",
    "TicketAttachment",
    "TicketCategory",
    "TicketCreate",
    "TicketStatus",

    # Comments and admins
    "ANONYMOUS_USER_ID",
    "AdminLogin",
    "AdminProfile",
    "AdminSignup",
    "CommentCreate",
    "TicketComment",
    "UserType",

    # Dashboard
    "DashboardResponse",
    "DashboardView",
    "DropRequest",
    "FilterOptions",
    "Notification",
    "NotificationKind",
    "StatusChangeRequest",
    "StatusChangeResponse",
    "TicketFilterParams",
    "TicketStats",
]
