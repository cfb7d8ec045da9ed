"""
Admin API Routes

Dashboard endpoints for ticket triage. Everything except login and signup
requires the X-Admin-API-Key header.
"""
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from supportdesk.middleware.admin_auth import current_admin_id, verify_admin_key
from supportdesk.models.schemas import (
    AdminLogin,
    AdminProfile,
    AdminSignup,
    CommentCreate,
    DashboardResponse,
    DashboardView,
    DropRequest,
    Notification,
    StatusChangeRequest,
    StatusChangeResponse,
    TicketComment,
    TicketFilterParams,
)
from supportdesk.models.ticket import Ticket
from supportdesk.routes.dependencies import get_admin_service, get_dashboard, get_ticket_service
from supportdesk.services.admin_service import (
    AdminExistsError,
    AdminService,
    EmailDomainNotAllowedError,
    InvalidCredentialsError,
)
from supportdesk.services.dashboard import DashboardSession
from supportdesk.services.drag_adapter import DropOutcome, DropResult
from supportdesk.services.ticket_service import TicketService
from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)

auth_router = APIRouter(prefix="/api/v1/admin", tags=["admin"])

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["admin"],
    dependencies=[Depends(verify_admin_key)]  # Apply to all routes
)

DashboardDep = Annotated[DashboardSession, Depends(get_dashboard)]
TicketServiceDep = Annotated[TicketService, Depends(get_ticket_service)]
AdminServiceDep = Annotated[AdminService, Depends(get_admin_service)]

# HTTP status for failed status changes, by error kind
FAILURE_STATUS = {
    "NotFound": status.HTTP_404_NOT_FOUND,
    "Rejected": status.HTTP_403_FORBIDDEN,
    "Unavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _status_response(result: DropResult) -> JSONResponse:
    """Translate a drop/status result into an HTTP response"""
    body = StatusChangeResponse(outcome=result.outcome.value, ticket=result.ticket)
    code = status.HTTP_200_OK

    if result.outcome == DropOutcome.BUSY:
        body.message = "Ticket is still being updated"
        code = status.HTTP_409_CONFLICT
    elif result.outcome == DropOutcome.FAILED and result.update is not None:
        body.error_kind = result.update.error_kind
        body.message = str(result.update.error)
        code = FAILURE_STATUS.get(body.error_kind, status.HTTP_503_SERVICE_UNAVAILABLE)

    return JSONResponse(status_code=code, content=body.model_dump(mode="json"))


# ============================================================================
# Authentication
# ============================================================================

@auth_router.post("/login", response_model=AdminProfile)
async def login(credentials: AdminLogin, service: AdminServiceDep):
    """Verify admin credentials and return the admin profile"""
    try:
        return await service.login(credentials)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))


@auth_router.post("/signup", response_model=AdminProfile, status_code=status.HTTP_201_CREATED)
async def signup(form: AdminSignup, service: AdminServiceDep):
    """Create an admin account"""
    try:
        return await service.signup(form)
    except EmailDomainNotAllowedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except AdminExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


# ============================================================================
# Dashboard
# ============================================================================

@router.get("/tickets", response_model=DashboardResponse)
async def dashboard(
    session: DashboardDep,
    view: DashboardView = DashboardView.TABLE,
    status_filter: str = Query("all", alias="status"),
    project: str = "",
    user: str = "",
    email_domain: str = "",
    search: str = "",
    refresh: bool = False,
):
    """
    Tickets for the dashboard as a table or kanban board

    Example:
        >>> GET /api/v1/admin/tickets?view=kanban&project=Website&search=login
        >>> Headers: X-Admin-API-Key: admin-secret
    """
    try:
        filters = TicketFilterParams(
            status=status_filter,
            project=project,
            user=user,
            email_domain=email_domain,
            search=search
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    if refresh:
        await session.refresh()
    else:
        await session.ensure_loaded()
    return session.view(view, filters)


@router.post("/tickets/refresh", response_model=DashboardResponse)
async def refresh_tickets(session: DashboardDep):
    """Reload every ticket from the database"""
    await session.refresh()
    return session.view(DashboardView.TABLE, TicketFilterParams())


@router.get("/tickets/{ticket_id}", response_model=Ticket)
async def get_ticket(ticket_id: str, service: TicketServiceDep):
    """Ticket detail with attachments"""
    return await service.get_ticket(ticket_id)


@router.post("/tickets/{ticket_id}/status", response_model=StatusChangeResponse)
async def change_status(ticket_id: str, payload: StatusChangeRequest, session: DashboardDep):
    """Change status from the status selector"""
    result = await session.change_status(ticket_id, payload.status)
    return _status_response(result)


@router.post("/board/drop", response_model=StatusChangeResponse)
async def drop_ticket(payload: DropRequest, session: DashboardDep):
    """Kanban drag-and-drop between columns"""
    result = await session.drop(payload.source_column, payload.destination_column, payload.ticket_id)
    return _status_response(result)


@router.get("/tickets/{ticket_id}/comments", response_model=List[TicketComment])
async def list_comments(ticket_id: str, service: TicketServiceDep):
    """All comments including internal notes"""
    return await service.list_comments(ticket_id, include_internal=True)


@router.post(
    "/tickets/{ticket_id}/comments",
    response_model=TicketComment,
    status_code=status.HTTP_201_CREATED
)
async def add_comment(
    ticket_id: str,
    payload: CommentCreate,
    service: TicketServiceDep,
    admin_id: Annotated[Optional[str], Depends(current_admin_id)] = None,
):
    """Reply to the customer or add an internal note"""
    return await service.add_admin_comment(
        ticket_id,
        payload.content,
        admin_id or payload.user_id,
        is_internal=payload.is_internal
    )


@router.get("/notifications", response_model=List[Notification])
async def notifications(
    session: DashboardDep,
    limit: int = Query(20, ge=1, le=200),
    ticket_id: Optional[str] = None,
):
    """Recent status-change notifications, newest first"""
    return session.notifications.recent(limit=limit, ticket_id=ticket_id)
