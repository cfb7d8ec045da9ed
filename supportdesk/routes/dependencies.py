"""
Service lookups for route handlers

Services are created once in the application lifespan and stored on
`app.state`; tests replace these functions through dependency_overrides.
"""
from fastapi import HTTPException, Request

from supportdesk.services.admin_service import AdminService
from supportdesk.services.dashboard import DashboardSession
from supportdesk.services.ticket_service import TicketService


def _state_service(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(status_code=503, detail=f"{name.replace('_', ' ').capitalize()} is not configured")
    return service


async def get_ticket_service(request: Request) -> TicketService:
    return _state_service(request, "ticket_service")


async def get_dashboard(request: Request) -> DashboardSession:
    return _state_service(request, "dashboard")


async def get_admin_service(request: Request) -> AdminService:
    return _state_service(request, "admin_service")
