"""
Pydantic models for SupportDesk

Comments, admin accounts, dashboard views and notification payloads.
Ticket models live in `supportdesk.models.ticket`.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from supportdesk.models.ticket import Ticket, TicketStatus
from supportdesk.utils.validators import validate_email

ANONYMOUS_USER_ID = "anonymous"


# ============================================================================
# Enums
# ============================================================================

class UserType(str, Enum):
    """Author type of a ticket comment"""
    ADMIN = "admin"
    USER = "user"


class NotificationKind(str, Enum):
    """Kind of user-facing notification"""
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class DashboardView(str, Enum):
    """Admin dashboard layouts"""
    TABLE = "table"
    KANBAN = "kanban"


# ============================================================================
# Comments
# ============================================================================

class TicketComment(BaseModel):
    """
    Comment on a ticket.

    Matches the `ticket_comments` table, enriched with the display name and
    email of the author resolved from `users` or `admins`.
    """
    model_config = ConfigDict(extra="ignore")

    id: str
    ticket_id: str
    content: str
    created_at: Optional[datetime] = None
    is_internal: bool = False
    user_type: UserType = UserType.USER
    user_id: str = ANONYMOUS_USER_ID
    user: str = "Anonymous"
    user_email: str = ""


class CommentCreate(BaseModel):
    """Request model for adding a comment"""
    content: str = Field(..., max_length=5000)
    user_id: Optional[str] = Field(None, max_length=255)
    is_internal: bool = False

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Comment cannot be empty")
        return v


# ============================================================================
# Admins
# ============================================================================

class AdminLogin(BaseModel):
    """Admin login credentials"""
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=1)


class AdminSignup(BaseModel):
    """Admin signup form"""
    name: str = Field(..., min_length=2, max_length=255)
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=6)

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v: str) -> str:
        v = v.strip().lower()
        if not validate_email(v):
            raise ValueError("Please provide a valid email address.")
        return v


class AdminProfile(BaseModel):
    """Admin account without credentials"""
    model_config = ConfigDict(extra="ignore")

    id: str
    email: str
    name: str
    is_admin: bool = True


# ============================================================================
# Notifications
# ============================================================================

class Notification(BaseModel):
    """One-way success/error signal surfaced to the dashboard user"""
    kind: NotificationKind
    message: str
    description: Optional[str] = None
    ticket_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# ============================================================================
# Dashboard API Models
# ============================================================================

class TicketFilterParams(BaseModel):
    """Dashboard filters; blank values and the `all*` sentinels mean no filter"""
    status: str = "all"
    project: str = ""
    user: str = ""
    email_domain: str = ""
    search: str = ""

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        if v != "all" and v not in {s.value for s in TicketStatus}:
            raise ValueError(f"Unknown status filter: {v}")
        return v


class TicketStats(BaseModel):
    """Ticket counts per status"""
    open: int = 0
    in_progress: int = 0
    closed: int = 0
    total: int = 0


class FilterOptions(BaseModel):
    """Distinct values available to the dashboard filters"""
    projects: List[str] = Field(default_factory=list)
    users: List[str] = Field(default_factory=list)
    email_domains: List[str] = Field(default_factory=list)


class DashboardResponse(BaseModel):
    """Admin dashboard payload"""
    view: DashboardView
    stats: TicketStats
    options: FilterOptions
    tickets: List[Ticket] = Field(default_factory=list)
    columns: Dict[str, List[Ticket]] = Field(default_factory=dict)


class StatusChangeRequest(BaseModel):
    """Status change from the admin status selector"""
    status: TicketStatus


class DropRequest(BaseModel):
    """Kanban drag-and-drop gesture"""
    ticket_id: str = Field(..., min_length=1)
    source_column: str
    destination_column: Optional[str] = None


class StatusChangeResponse(BaseModel):
    """Outcome of a status change or drop"""
    outcome: Literal["updated", "failed", "busy", "ignored"]
    ticket: Optional[Ticket] = None
    error_kind: Optional[str] = None
    message: Optional[str] = None
