"""
Support Desk - FastAPI Backend
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from supabase import create_client

from supportdesk import __version__
from supportdesk.config import get_settings
from supportdesk.middleware.logging_middleware import LoggingMiddleware
from supportdesk.repositories import (
    AdminRepository,
    AttachmentRepository,
    CommentRepository,
    RemoteServiceError,
    TicketRepository,
    UserRepository,
)
from supportdesk.routes import admin, health, tickets
from supportdesk.services.admin_service import AdminService
from supportdesk.services.dashboard import DashboardSession
from supportdesk.services.ticket_service import AttachmentTooLargeError, TicketService
from supportdesk.utils.logger import get_logger

settings = get_settings()
logger = get_logger(__name__)

# HTTP status by remote error kind
REMOTE_ERROR_STATUS = {
    "NotFound": 404,
    "Rejected": 403,
    "Unavailable": 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the Supabase client and the services shared by all requests"""
    client = create_client(settings.supabase_url, settings.supabase_admin_key)
    ticket_repo = TicketRepository(client)

    app.state.supabase = client
    app.state.ticket_service = TicketService(
        tickets=ticket_repo,
        users=UserRepository(client),
        attachments=AttachmentRepository(client),
        comments=CommentRepository(client)
    )
    app.state.dashboard = DashboardSession(ticket_repo)
    app.state.admin_service = AdminService(AdminRepository(client))
    logger.info(f"Support desk started ({settings.fastapi_env})")

    try:
        yield
    finally:
        await app.state.dashboard.aclose()
        logger.info("Support desk stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Support Desk",
        description="Customer support ticketing API",
        version=__version__,
        lifespan=lifespan
    )

    # Middleware runs bottom-up: CORS first, then logging
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    app.include_router(tickets.router)
    app.include_router(admin.auth_router)
    app.include_router(admin.router)
    app.include_router(health.router)

    @app.exception_handler(RemoteServiceError)
    async def remote_error_handler(request: Request, exc: RemoteServiceError):
        code = REMOTE_ERROR_STATUS.get(exc.kind, 503)
        if code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=code, content={"detail": str(exc), "error_kind": exc.kind})

    @app.exception_handler(AttachmentTooLargeError)
    async def attachment_too_large_handler(request: Request, exc: AttachmentTooLargeError):
        return JSONResponse(status_code=413, content={"detail": str(exc)})

    @app.get("/")
    async def root():
        return {"message": "Support Desk API", "version": __version__}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.fastapi_host, port=settings.fastapi_port)
