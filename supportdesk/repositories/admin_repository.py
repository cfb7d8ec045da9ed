"""
Admin Repository for the `admins` table

Passwords are verified by the `check_admin_password` database function and
hashed by a trigger on insert; plain passwords never leave this module
except as RPC/insert parameters.
"""
from typing import Optional

from supportdesk.models.schemas import AdminProfile
from supportdesk.repositories.base_repository import BaseRepository, RejectedError
from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)


class AdminRepository(BaseRepository):
    """Repository for admins table operations"""

    table_name = "admins"

    async def get_by_email(self, email: str) -> Optional[AdminProfile]:
        """Get an admin by email, None if unknown"""
        response = await self._execute(
            "get admin by email",
            lambda: self.client.table(self.table_name)
            .select("id, email, name")
            .eq("email", email.strip().lower())
            .execute()
        )
        if not response.data:
            return None
        return AdminProfile(**response.data[0])

    async def check_password(self, email: str, password: str) -> bool:
        """Verify an admin password through the database"""
        response = await self._execute(
            "check admin password",
            lambda: self.client.rpc(
                "check_admin_password",
                {"admin_email": email.strip().lower(), "admin_password": password}
            ).execute()
        )
        return response.data is True

    async def create(self, name: str, email: str, password: str) -> AdminProfile:
        """
        Create an admin account

        The `password_hash` column receives the plain password and is
        hashed by the database trigger.
        """
        response = await self._execute(
            "create admin",
            lambda: self.client.table(self.table_name)
            .insert({"name": name, "email": email.strip().lower(), "password_hash": password})
            .execute()
        )
        if not response.data:
            raise RejectedError("create admin: no row returned", operation="create admin")

        admin = AdminProfile(**response.data[0])
        logger.info(f"Created admin: {admin.id}")
        return admin
