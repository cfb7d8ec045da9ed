"""
Customer-facing ticket operations

- Ticket submission with attachments
- Status lookup by email
- Ticket detail and comments
"""
from dataclasses import dataclass
from typing import List, Optional

from supportdesk.config import get_settings
from supportdesk.models.schemas import TicketComment, UserType
from supportdesk.models.ticket import Ticket, TicketCreate, TicketStatus
from supportdesk.repositories import (
    AttachmentRepository,
    CommentRepository,
    NotFoundError,
    TicketRepository,
    UserRepository,
)
from supportdesk.utils.logger import get_logger
from supportdesk.utils.validators import validate_email

logger = get_logger(__name__)
settings = get_settings()


class AttachmentTooLargeError(ValueError):
    """Raised when an uploaded file exceeds the configured size limit"""


@dataclass
class AttachmentUpload:
    """File received with a ticket submission"""

    file_name: str
    content: bytes
    content_type: Optional[str] = None


class TicketService:
    """Ticket submission, lookup and comments"""

    def __init__(
        self,
        tickets: TicketRepository,
        users: UserRepository,
        attachments: AttachmentRepository,
        comments: CommentRepository,
        max_attachment_bytes: Optional[int] = None
    ):
        self.tickets = tickets
        self.users = users
        self.attachments = attachments
        self.comments = comments
        self.max_attachment_bytes = max_attachment_bytes or settings.max_attachment_bytes

    def check_attachment_size(self, file_name: str, size: Optional[int]) -> None:
        """
        Refuse a file larger than the configured limit

        Raises:
            AttachmentTooLargeError: If size exceeds max_attachment_bytes (unknown sizes pass)
        """
        if size is not None and size > self.max_attachment_bytes:
            raise AttachmentTooLargeError(f"{file_name} exceeds {self.max_attachment_bytes} bytes")

    async def submit(self, form: TicketCreate, files: Optional[List[AttachmentUpload]] = None) -> Ticket:
        """
        Create a ticket for the submitting customer

        The customer row is created on first submission. Attachments are
        size-checked before anything is written.

        Raises:
            AttachmentTooLargeError: If any file exceeds the limit
        """
        files = [f for f in files or [] if f.content]
        for upload in files:
            self.check_attachment_size(upload.file_name, len(upload.content))

        user = await self.users.get_or_create(form.name, form.email)
        ticket = await self.tickets.create({
            "user_id": user["id"],
            "title": form.title(),
            "project": form.project,
            "category": form.category.value,
            "description": form.description,
            "status": TicketStatus.OPEN.value,
        })

        stored = [
            await self.attachments.upload(ticket.id, f.file_name, f.content, f.content_type)
            for f in files
        ]
        logger.info(f"Ticket {ticket.id} submitted by {form.email} with {len(stored)} attachments")
        return ticket.model_copy(update={
            "name": user.get("name") or form.name,
            "email": user.get("email") or form.email,
            "attachments": stored,
        })

    async def lookup_by_email(self, email: str) -> List[Ticket]:
        """
        Tickets submitted under an email, newest first

        Unknown or malformed emails return an empty list.
        """
        email = (email or "").strip().lower()
        if not validate_email(email):
            return []

        users = await self.users.find_by_email(email)
        return await self.tickets.list_by_user_ids([u["id"] for u in users])

    async def get_ticket(self, ticket_id: str) -> Ticket:
        """
        Ticket detail with attachments

        Raises:
            NotFoundError: If the ticket does not exist
        """
        ticket = await self.tickets.get_by_id(ticket_id)
        if ticket is None:
            raise NotFoundError(f"Ticket {ticket_id} not found", operation="get ticket")

        attachments = await self.attachments.list_for_ticket(ticket_id)
        return ticket.model_copy(update={"attachments": attachments})

    async def list_comments(self, ticket_id: str, include_internal: bool = False) -> List[TicketComment]:
        return await self.comments.list_for_ticket(ticket_id, include_internal=include_internal)

    async def add_customer_comment(self, ticket_id: str, content: str) -> TicketComment:
        """Comment by the ticket's customer; never internal"""
        owner_id = await self.tickets.get_owner_id(ticket_id)
        if owner_id is None:
            raise NotFoundError(f"Ticket {ticket_id} not found", operation="add comment")
        return await self.comments.add(ticket_id, content, owner_id, UserType.USER, is_internal=False)

    async def add_admin_comment(
        self,
        ticket_id: str,
        content: str,
        admin_id: Optional[str],
        is_internal: bool = False
    ) -> TicketComment:
        """Reply or internal note from an admin"""
        return await self.comments.add(ticket_id, content, admin_id, UserType.ADMIN, is_internal=is_internal)
