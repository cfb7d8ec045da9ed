"""
Customer ticket routes

- POST /api/v1/tickets - Submit a ticket (multipart form with attachments)
- GET  /api/v1/tickets/status?email= - Tickets submitted under an email
- GET  /api/v1/tickets/{ticket_id} - Ticket detail
- GET  /api/v1/tickets/{ticket_id}/comments - Public comments
- POST /api/v1/tickets/{ticket_id}/comments - Customer comment
"""
from typing import Annotated, List

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from pydantic import ValidationError

from supportdesk.models.schemas import CommentCreate, TicketComment
from supportdesk.models.ticket import Ticket, TicketCategory, TicketCreate
from supportdesk.routes.dependencies import get_ticket_service
from supportdesk.services.ticket_service import AttachmentUpload, TicketService
from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/tickets", tags=["tickets"])

TicketServiceDep = Annotated[TicketService, Depends(get_ticket_service)]


@router.post("", response_model=Ticket, status_code=status.HTTP_201_CREATED)
async def submit_ticket(
    service: TicketServiceDep,
    name: str = Form(...),
    email: str = Form(...),
    project: str = Form(...),
    description: str = Form(...),
    category: TicketCategory = Form(TicketCategory.BUG),
    files: List[UploadFile] = File(default=[]),
):
    """
    Submit a support ticket

    Returns:
        Created ticket with its stored attachments
    """
    try:
        form = TicketCreate(
            name=name,
            email=email,
            project=project,
            category=category,
            description=description
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False, include_input=False)
        )

    # Reads stop one byte past the limit so an oversized file is never buffered whole
    limit = service.max_attachment_bytes
    uploads = []
    for upload in files:
        file_name = upload.filename or "attachment"
        service.check_attachment_size(file_name, upload.size)
        content = await upload.read(limit + 1)
        service.check_attachment_size(file_name, len(content))
        uploads.append(AttachmentUpload(
            file_name=file_name,
            content=content,
            content_type=upload.content_type
        ))
    return await service.submit(form, uploads)


@router.get("/status", response_model=List[Ticket])
async def ticket_status(
    service: TicketServiceDep,
    email: str = Query(..., min_length=1, description="Email used when submitting")
):
    """Tickets submitted under an email, newest first"""
    return await service.lookup_by_email(email)


@router.get("/{ticket_id}", response_model=Ticket)
async def get_ticket(ticket_id: str, service: TicketServiceDep):
    """Ticket detail with attachments"""
    return await service.get_ticket(ticket_id)


@router.get("/{ticket_id}/comments", response_model=List[TicketComment])
async def list_comments(ticket_id: str, service: TicketServiceDep):
    """Comments visible to the customer (internal notes excluded)"""
    return await service.list_comments(ticket_id, include_internal=False)


@router.post(
    "/{ticket_id}/comments",
    response_model=TicketComment,
    status_code=status.HTTP_201_CREATED
)
async def add_comment(ticket_id: str, payload: CommentCreate, service: TicketServiceDep):
    """Add a customer comment; `is_internal` is ignored for customers"""
    return await service.add_customer_comment(ticket_id, payload.content)
