"""
Ticket Repository for the `tickets` table

Features:
- Full listing for the admin dashboard (newest first)
- Ticket detail joined with its user
- Lookup by owning user ids for the customer status page
- Status writes that return the updated rows
"""
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from supportdesk.models.ticket import StatusUpdateRow, Ticket, TicketStatus
from supportdesk.repositories.base_repository import BaseRepository, NotFoundError, RejectedError
from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)

TICKET_WITH_USER = "*, users!tickets_user_id_fkey (name, email)"


class TicketRepository(BaseRepository):
    """Repository for tickets table operations"""

    table_name = "tickets"

    def _parse_rows(self, operation: str, rows: List[Dict[str, Any]]) -> List[Ticket]:
        """
        Parse joined ticket rows, refusing the whole response if any row is malformed

        Raises:
            RejectedError: If a row does not match the Ticket schema
        """
        try:
            return [Ticket.from_row(row) for row in rows]
        except (ValidationError, TypeError) as e:
            logger.error(f"Malformed ticket row during {operation}: {e}")
            raise RejectedError("Malformed response from ticket service", operation=operation) from e

    async def list_all(self) -> List[Ticket]:
        """
        List every ticket with its customer's name and email

        Returns:
            Tickets ordered newest first

        Raises:
            RejectedError: If any listed row is malformed
        """
        response = await self._execute(
            "list tickets",
            lambda: self.client.table(self.table_name)
            .select(TICKET_WITH_USER)
            .order("created_at", desc=True)
            .execute()
        )
        tickets = self._parse_rows("list tickets", response.data or [])
        logger.info(f"Fetched {len(tickets)} tickets")
        return tickets

    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        """
        Get a ticket joined with its customer (attachments are not included)

        Args:
            ticket_id: Ticket ID

        Returns:
            Ticket if found, None otherwise
        """
        operation = f"get ticket {ticket_id}"
        try:
            response = await self._execute(
                operation,
                lambda: self.client.table(self.table_name)
                .select(TICKET_WITH_USER)
                .eq("id", ticket_id)
                .single()
                .execute()
            )
        except NotFoundError:
            return None

        if not response.data:
            return None
        return self._parse_rows(operation, [response.data])[0]

    async def list_by_user_ids(self, user_ids: List[str]) -> List[Ticket]:
        """
        List tickets owned by any of the given users, newest first

        Args:
            user_ids: Owning user IDs

        Returns:
            List of Tickets (empty if no user ids are given)
        """
        if not user_ids:
            return []

        response = await self._execute(
            "list tickets by user",
            lambda: self.client.table(self.table_name)
            .select(TICKET_WITH_USER)
            .in_("user_id", user_ids)
            .order("created_at", desc=True)
            .execute()
        )
        return self._parse_rows("list tickets by user", response.data or [])

    async def create(self, data: Dict[str, Any]) -> Ticket:
        """
        Insert a ticket row

        Args:
            data: Column values (user_id, title, project, category, description, status)

        Returns:
            Created Ticket
        """
        response = await self._execute(
            "create ticket",
            lambda: self.client.table(self.table_name).insert(data).execute()
        )
        if not response.data:
            raise RejectedError("create ticket: no row returned", operation="create ticket")

        ticket = self._parse_rows("create ticket", response.data[:1])[0]
        logger.info(f"Created ticket: {ticket.id}")
        return ticket


    async def get_owner_id(self, ticket_id: str) -> Optional[str]:
        """Return the user id that submitted a ticket"""
        response = await self._execute(
            f"get owner of {ticket_id}",
            lambda: self.client.table(self.table_name)
            .select("user_id")
            .eq("id", ticket_id)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("user_id")

    async def update_status(
        self,
        ticket_id: str,
        status: TicketStatus,
        updated_at: str
    ) -> List[StatusUpdateRow]:
        """
        Write a new status and return the rows the database reports back

        Args:
            ticket_id: Ticket ID
            status: Requested status
            updated_at: Client timestamp sent with the write

        Returns:
            Updated rows parsed into StatusUpdateRow (empty if nothing matched)

        Raises:
            RejectedError: If a returned row does not match the expected schema
        """
        response = await self._execute(
            f"update status of {ticket_id}",
            lambda: self.client.table(self.table_name)
            .update({"status": status.value, "updated_at": updated_at})
            .eq("id", ticket_id)
            .execute()
        )

        try:
            rows = [StatusUpdateRow.model_validate(row) for row in response.data or []]
        except ValidationError as e:
            logger.error(f"Malformed status update response for {ticket_id}: {e}")
            raise RejectedError(
                "Malformed response from ticket service",
                operation=f"update status of {ticket_id}"
            ) from e

        logger.info(f"Updated status of ticket {ticket_id} to {status.value} ({len(rows)} rows)")
        return rows
