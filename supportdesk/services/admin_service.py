"""
Admin account operations (login and signup)
"""
from typing import Optional

from supportdesk.config import get_settings
from supportdesk.models.schemas import AdminLogin, AdminProfile, AdminSignup
from supportdesk.repositories import AdminRepository
from supportdesk.utils.logger import get_logger
from supportdesk.utils.validators import email_domain

logger = get_logger(__name__)
settings = get_settings()


class AdminAuthError(Exception):
    """Base error for admin account operations"""


class InvalidCredentialsError(AdminAuthError):
    """Unknown email or wrong password"""


class AdminExistsError(AdminAuthError):
    """Signup for an email that already has an account"""


class EmailDomainNotAllowedError(AdminAuthError):
    """Signup email outside the allowed admin domain"""


class AdminService:
    """Admin login and signup"""

    def __init__(self, admins: AdminRepository, allowed_domain: Optional[str] = None):
        self.admins = admins
        domain = settings.admin_email_domain if allowed_domain is None else allowed_domain
        self.allowed_domain = domain.strip().lstrip("@").lower()

    async def login(self, credentials: AdminLogin) -> AdminProfile:
        """
        Verify admin credentials

        Raises:
            InvalidCredentialsError: If the email is unknown or the password wrong
        """
        admin = await self.admins.get_by_email(credentials.email)
        if admin is None:
            logger.warning("Admin login failed: unknown email")
            raise InvalidCredentialsError("Invalid credentials")

        if not await self.admins.check_password(credentials.email, credentials.password):
            logger.warning(f"Admin login failed for {admin.id}: wrong password")
            raise InvalidCredentialsError("Invalid credentials")

        logger.info(f"Admin {admin.id} logged in")
        return admin

    async def signup(self, form: AdminSignup) -> AdminProfile:
        """
        Create an admin account

        Raises:
            EmailDomainNotAllowedError: If the email is outside the admin domain
            AdminExistsError: If the email already has an account
        """
        if self.allowed_domain and email_domain(form.email) != self.allowed_domain:
            raise EmailDomainNotAllowedError(f"Only @{self.allowed_domain} email addresses are allowed")

        if await self.admins.get_by_email(form.email) is not None:
            raise AdminExistsError("An account with this email already exists")

        return await self.admins.create(form.name, form.email, form.password)
