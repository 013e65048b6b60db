from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from datetime import timedelta
from dotenv import load_dotenv
import logging
import time

load_dotenv()

from contact_access.core.auth import (
    AuthorizedUserStore,
    SessionTokenService,
    SqlAuthorizedUserStore,
    StaticAuthorizedUserStore,
)
from contact_access.core.config import Settings, settings as default_settings
from contact_access.core.exception_handlers import setup_exception_handlers
from contact_access.db.session import SessionLocal
from contact_access.routes import access_requests, contacts
from contact_access.services.access_requests import AccessRequestService
from contact_access.services.decisions import AccessDecisionService
from contact_access.services.rate_limiter import AccessRequestRateLimiter
from contact_access.utils import configure_logging, utcnow

logger = logging.getLogger("contact_access.http")


def create_app(
    settings: Settings = default_settings,
    session_factory=None,
    authorized_store: AuthorizedUserStore = None,
    clock=utcnow,
) -> FastAPI:
    """Build the API with its collaborators.

    ``session_factory`` defaults to the configured database and
    ``authorized_store`` to ``AUTHORIZED_EMAILS`` when set, otherwise the
    ``authorized_users`` table.
    """
    configure_logging(settings.LOG_LEVEL)

    session_factory = session_factory or SessionLocal
    if authorized_store is None:
        if settings.authorized_emails:
            authorized_store = StaticAuthorizedUserStore(settings.authorized_emails)
        else:
            authorized_store = SqlAuthorizedUserStore(session_factory)

    app = FastAPI(
        title="Contact Access API",
        description="Access requests, approvals and visibility grants for private contacts",
        version="1.0.0",
        openapi_tags=[
            {"name": "Access Requests", "description": "Request, approve and deny access to private contacts"},
            {"name": "Contacts", "description": "Contact visibility checks"},
        ],
    )

    app.state.session_factory = session_factory
    app.state.token_service = SessionTokenService(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        store=authorized_store,
    )
    app.state.access_request_service = AccessRequestService(
        session_factory,
        rate_limiter=AccessRequestRateLimiter(
            limit=settings.ACCESS_REQUEST_RATE_LIMIT,
            window=timedelta(minutes=settings.ACCESS_REQUEST_RATE_WINDOW_MINUTES),
            clock=clock,
        ),
        clock=clock,
        message_max_length=settings.ACCESS_REQUEST_MESSAGE_MAX_LENGTH,
    )
    app.state.decision_service = AccessDecisionService(session_factory, clock=clock)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all incoming API requests"""
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "http.request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 1),
                "client": request.client.host if request.client else "unknown",
            },
        )
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app, settings.cors_origins)

    app.include_router(
        access_requests.router,
        prefix="/api/access-requests",
        tags=["Access Requests"],
    )
    app.include_router(contacts.router, prefix="/api/contacts", tags=["Contacts"])

    @app.get("/api/health")
    async def health_check():
        return {"status": "healthy"}

    return app


app = create_app()

# Run uvicorn server when file is executed directly
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
