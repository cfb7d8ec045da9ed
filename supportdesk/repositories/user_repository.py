"""
User Repository for the `users` table (ticket submitters)
"""
from typing import Any, Dict, List

from supportdesk.repositories.base_repository import BaseRepository, RejectedError
from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)


class UserRepository(BaseRepository):
    """Repository for users table operations"""

    table_name = "users"

    async def find_by_email(self, email: str) -> List[Dict[str, Any]]:
        """
        Find users registered under an email address

        Args:
            email: Email address (compared lowercase)

        Returns:
            Matching user rows (id, name, email)
        """
        response = await self._execute(
            "find users by email",
            lambda: self.client.table(self.table_name)
            .select("id, name, email")
            .eq("email", email.strip().lower())
            .execute()
        )
        return list(response.data or [])

    async def get_or_create(self, name: str, email: str) -> Dict[str, Any]:
        """
        Return the user for an email, creating it on first submission

        Args:
            name: Display name for a new user
            email: Email address

        Returns:
            User row
        """
        existing = await self.find_by_email(email)
        if existing:
            return existing[0]

        response = await self._execute(
            "create user",
            lambda: self.client.table(self.table_name)
            .insert({"name": name, "email": email.strip().lower()})
            .execute()
        )
        if not response.data:
            raise RejectedError("create user: no row returned", operation="create user")

        user = response.data[0]
        logger.info(f"Created user: {user.get('id')}")
        return user
