"""
Attachment Repository

Uploads files to the Supabase storage bucket and records them in the
`ticket_attachments` table.
"""
from typing import List, Optional

from pydantic import ValidationError

from supportdesk.config import get_settings
from supportdesk.models.ticket import TicketAttachment
from supportdesk.repositories.base_repository import BaseRepository, RejectedError
from supportdesk.utils.logger import get_logger
from supportdesk.utils.validators import sanitize_file_name

logger = get_logger(__name__)
settings = get_settings()


class AttachmentRepository(BaseRepository):
    """Repository for ticket attachments (storage objects plus table rows)"""

    table_name = "ticket_attachments"

    def __init__(self, supabase_client=None, timeout: Optional[float] = None, bucket: Optional[str] = None):
        super().__init__(supabase_client=supabase_client, timeout=timeout)
        self.bucket = bucket or settings.attachments_bucket

    async def list_for_ticket(self, ticket_id: str) -> List[TicketAttachment]:
        """List the attachments of a ticket"""
        response = await self._execute(
            f"list attachments for {ticket_id}",
            lambda: self.client.table(self.table_name)
            .select("*")
            .eq("ticket_id", ticket_id)
            .execute()
        )
        try:
            return [TicketAttachment(**row) for row in response.data or []]
        except (ValidationError, TypeError) as e:
            logger.error(f"Malformed attachment row for {ticket_id}: {e}")
            raise RejectedError(
                "Malformed response from ticket service",
                operation=f"list attachments for {ticket_id}"
            ) from e

    async def upload(
        self,
        ticket_id: str,
        file_name: str,
        content: bytes,
        content_type: Optional[str] = None
    ) -> TicketAttachment:
        """
        Store a file under `<ticket_id>/<file_name>` and record it

        Args:
            ticket_id: Owning ticket
            file_name: Original file name (sanitized for the object key)
            content: File bytes
            content_type: MIME type, defaults to application/octet-stream

        Returns:
            Created TicketAttachment
        """
        safe_name = sanitize_file_name(file_name)
        path = f"{ticket_id}/{safe_name}"
        storage = self.client.storage.from_(self.bucket)

        await self._execute(
            f"upload {path}",
            lambda: storage.upload(
                path,
                content,
                {"content-type": content_type or "application/octet-stream"}
            )
        )
        public_url = storage.get_public_url(path)

        response = await self._execute(
            f"record attachment {path}",
            lambda: self.client.table(self.table_name)
            .insert({
                "ticket_id": ticket_id,
                "file_name": file_name or safe_name,
                "file_url": public_url,
            })
            .execute()
        )
        if not response.data:
            raise RejectedError(f"record attachment {path}: no row returned")

        attachment = TicketAttachment(**response.data[0])
        logger.info(f"Stored attachment {attachment.id} for ticket {ticket_id}")
        return attachment
