"""
Repositories package for database operations

Provides repository classes for CRUD operations on:
- tickets table (TicketRepository)
- users table (UserRepository)
- ticket_attachments table and storage bucket (AttachmentRepository)
- ticket_comments table (CommentRepository)
- admins table (AdminRepository)
"""
from supportdesk.repositories.base_repository import (
    BaseRepository,
    NotFoundError,
    RejectedError,
    RemoteServiceError,
    UnavailableError,
)
from supportdesk.repositories.ticket_repository import TicketRepository
from supportdesk.repositories.user_repository import UserRepository
from supportdesk.repositories.attachment_repository import AttachmentRepository
from supportdesk.repositories.comment_repository import CommentRepository
from supportdesk.repositories.admin_repository import AdminRepository

__all__ = [
    "BaseRepository",
    "NotFoundError",
    "RejectedError",
    "RemoteServiceError",
    "UnavailableError",
    "TicketRepository",
    "UserRepository",
    "AttachmentRepository",
    "CommentRepository",
    "AdminRepository",
]
