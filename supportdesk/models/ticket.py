"""
Ticket data models

Mirrors the `tickets` and `ticket_attachments` tables in Supabase and the
strict row schema used when adopting status updates returned by the database.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from supportdesk.utils.validators import parse_timestamp, sanitize_input, validate_email


class TicketStatus(str, Enum):
    """Valid ticket statuses (closed set, any status reachable from any other)"""
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    CLOSED = "Closed"


class TicketCategory(str, Enum):
    """Valid ticket categories"""
    BUG = "Bug"
    COMPLAINT = "Complaint"
    DELIVERY_ISSUE = "Delivery Issue"
    OTHER = "Other"


class TicketAttachment(BaseModel):
    """File attached to a ticket, stored in the attachments bucket"""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    ticket_id: str
    file_url: str
    file_name: str
    created_at: Optional[datetime] = None


class Ticket(BaseModel):
    """
    Support ticket as held by the dashboard.

    Instances are frozen: the ticket store replaces entries instead of
    mutating them, so a snapshot never shows a half-applied update.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    status: TicketStatus
    project: str
    category: TicketCategory
    description: str
    name: str = ""
    email: str = ""
    title: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    attachments: List[TicketAttachment] = Field(default_factory=list)

    @classmethod
    def from_row(
        cls,
        row: Dict[str, Any],
        attachments: Optional[List[Dict[str, Any]]] = None
    ) -> "Ticket":
        """
        Build a ticket from a `tickets` row joined with its `users` row.

        The join arrives as a nested `users` object; missing users leave the
        name and email blank.
        """
        data = dict(row)
        user = data.pop("users", None) or {}
        data.setdefault("name", user.get("name") or "")
        data.setdefault("email", user.get("email") or "")
        if attachments is not None:
            data["attachments"] = [TicketAttachment(**a) for a in attachments]
        return cls(**data)


class TicketCreate(BaseModel):
    """Ticket submission form"""
    name: str = Field(..., min_length=2, max_length=255, description="Customer full name")
    email: str = Field(..., max_length=255, description="Customer email")
    project: str = Field(..., min_length=1, max_length=255, description="Project name")
    category: TicketCategory = TicketCategory.BUG
    description: str = Field(..., min_length=10, description="Issue description")

    @field_validator("name", "project", "description", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return sanitize_input(v)
        return v

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v: str) -> str:
        v = v.strip().lower()
        if not validate_email(v):
            raise ValueError("Please provide a valid email address.")
        return v

    def title(self) -> str:
        """Ticket title stored alongside the submission"""
        return f"{self.category.value} - {self.project}"


class StatusUpdateRow(BaseModel):
    """
    Strict schema for a row returned by a status update.

    Only the fields the dashboard adopts from the server are kept; anything
    that does not parse is refused before it reaches the ticket store.
    """
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    status: TicketStatus
    updated_at: datetime

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        if isinstance(v, (int, str)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("updated_at", mode="before")
    @classmethod
    def parse_updated_at(cls, v: Any) -> datetime:
        return parse_timestamp(v)
