"""
Comment Repository for the `ticket_comments` table

Comment authors are stored as bare ids; display names are resolved from
`users` or `admins` depending on the comment's user_type.
"""
from typing import Any, Dict, List, Optional

from supportdesk.models.schemas import ANONYMOUS_USER_ID, TicketComment, UserType
from supportdesk.repositories.base_repository import BaseRepository, RejectedError
from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)

COMMENT_COLUMNS = "id, ticket_id, content, created_at, is_internal, user_type, user_id"


class CommentRepository(BaseRepository):
    """Repository for ticket_comments table operations"""

    table_name = "ticket_comments"

    async def list_for_ticket(self, ticket_id: str, include_internal: bool = False) -> List[TicketComment]:
        """
        List comments of a ticket, newest first

        Args:
            ticket_id: Ticket ID
            include_internal: Include admin-only notes

        Returns:
            Comments with resolved author names
        """
        def query():
            builder = self.client.table(self.table_name)\
                .select(COMMENT_COLUMNS)\
                .eq("ticket_id", ticket_id)
            if not include_internal:
                builder = builder.eq("is_internal", False)
            return builder.order("created_at", desc=True).execute()

        response = await self._execute(f"list comments for {ticket_id}", query)
        rows = list(response.data or [])

        user_ids = [
            r["user_id"] for r in rows
            if r.get("user_type") != UserType.ADMIN.value and r.get("user_id") != ANONYMOUS_USER_ID
        ]
        admin_ids = [
            r["user_id"] for r in rows
            if r.get("user_type") == UserType.ADMIN.value and r.get("user_id") != ANONYMOUS_USER_ID
        ]
        users = await self._lookup("users", user_ids)
        admins = await self._lookup("admins", admin_ids)

        return [self._to_comment(row, users, admins) for row in rows]

    async def add(
        self,
        ticket_id: str,
        content: str,
        user_id: Optional[str],
        user_type: UserType,
        is_internal: bool = False
    ) -> TicketComment:
        """
        Add a comment to a ticket

        Args:
            ticket_id: Ticket ID
            content: Comment body
            user_id: Author id; stored as `anonymous` when missing
            user_type: admin or user
            is_internal: Admin-only note (ignored for user comments)

        Returns:
            Created comment with resolved author name
        """
        payload = {
            "ticket_id": ticket_id,
            "content": content,
            "user_id": user_id or ANONYMOUS_USER_ID,
            "user_type": user_type.value,
            "is_internal": bool(is_internal and user_type == UserType.ADMIN),
        }
        response = await self._execute(
            f"add comment to {ticket_id}",
            lambda: self.client.table(self.table_name).insert(payload).execute()
        )
        if not response.data:
            raise RejectedError(f"add comment to {ticket_id}: no row returned")

        row = response.data[0]
        author_table = "admins" if user_type == UserType.ADMIN else "users"
        authors = await self._lookup(author_table, [payload["user_id"]])
        comment = self._to_comment(
            row,
            users=authors if user_type == UserType.USER else {},
            admins=authors if user_type == UserType.ADMIN else {}
        )
        logger.info(f"Added {user_type.value} comment {comment.id} to ticket {ticket_id}")
        return comment

    async def _lookup(self, table: str, ids: List[str]) -> Dict[str, Dict[str, Any]]:
        """Fetch name/email for author ids"""
        ids = [i for i in ids if i and i != ANONYMOUS_USER_ID]
        if not ids:
            return {}

        response = await self._execute(
            f"resolve {table} names",
            lambda: self.client.table(table)
            .select("id, name, email")
            .in_("id", sorted(set(ids)))
            .execute()
        )
        return {row["id"]: row for row in response.data or []}

    @staticmethod
    def _to_comment(
        row: Dict[str, Any],
        users: Dict[str, Dict[str, Any]],
        admins: Dict[str, Dict[str, Any]]
    ) -> TicketComment:
        """Convert a comment row into TicketComment with display name"""
        user_type = UserType.ADMIN if row.get("user_type") == UserType.ADMIN.value else UserType.USER
        user_id = row.get("user_id") or ANONYMOUS_USER_ID

        name, email = "Anonymous", ""
        if user_id != ANONYMOUS_USER_ID:
            source = admins if user_type == UserType.ADMIN else users
            author = source.get(user_id)
            default = "Admin" if user_type == UserType.ADMIN else "User"
            name = author.get("name") if author else default
            email = author.get("email", "") if author else ""

        return TicketComment(
            id=str(row["id"]),
            ticket_id=str(row["ticket_id"]),
            content=row.get("content", ""),
            created_at=row.get("created_at"),
            is_internal=bool(row.get("is_internal")),
            user_type=user_type,
            user_id=user_id,
            user=name,
            user_email=email,
        )
