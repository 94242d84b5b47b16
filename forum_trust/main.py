"""
Forum Trust & Moderation Engine

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from forum_trust.api.deps import get_outbox
from forum_trust.api.middleware.request_id import RequestIdMiddleware
from forum_trust.api.v1 import router as api_v1_router
from forum_trust.config import get_settings
from forum_trust.database import close_db, init_db
from forum_trust.exceptions import (
    AuthorizationError,
    ForumTrustError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from forum_trust.logging_config import configure_logging, get_logger
from forum_trust.schemas.common import HealthResponse

settings = get_settings()
logger = get_logger(__name__)

ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    StorageError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Runs startup and shutdown tasks.
    """
    # Configure logging first
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    # Startup
    logger.info("Starting %s v%s", settings.project_name, settings.version)
    await init_db()
    logger.info("Database initialized")
    outbox = get_outbox()
    await outbox.start()

    yield

    # Shutdown
    logger.info("Shutting down...")
    await outbox.stop()
    if outbox.dead_letters:
        logger.warning("Undelivered notifications dropped", extra={"count": len(outbox.dead_letters)})
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.project_name,
    description="""
    Forum content trust and moderation engine.

    ## Features

    - **Moderation**: pending / approved / quarantined / removed state machine with restriction history
    - **Reports**: user reports with triage counters and resolution tracking
    - **Roles**: five-level role hierarchy with precedence-checked role changes
    - **Bulk operations**: aggregate success/failure counts instead of fail-fast
    - **Audit**: append-only log of every moderation, role and report change
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# LAST added = OUTERMOST; CORS wraps everything
_cors_origins = [
    "http://localhost:3000",
    "http://localhost:5173",  # Vite default
    "http://127.0.0.1:3000",
]

app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_headers(request: Request) -> dict:
    req_id = getattr(request.state, "request_id", None)
    return {"X-Request-ID": req_id} if req_id else {}


@app.exception_handler(ForumTrustError)
async def forum_trust_exception_handler(request: Request, exc: ForumTrustError):
    """Map engine errors onto HTTP status codes."""
    status_code = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)),
        status.HTTP_400_BAD_REQUEST,
    )
    if status_code >= 500:
        logger.error("Storage failure", extra={"path": request.url.path, "error": exc.message})
    content = {
        "detail": exc.message,
        "code": exc.code,
        "field": exc.field,
        "request_id": getattr(request.state, "request_id", None),
    }
    return JSONResponse(status_code=status_code, content=content, headers=_error_headers(request))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    headers = dict(exc.headers or {})
    headers.update(_error_headers(request))
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
):
    """Handle request validation errors."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })
    content = {
        "detail": "Validation error",
        "errors": errors,
        "request_id": getattr(request.state, "request_id", None),
    }
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=content,
        headers=_error_headers(request),
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception,
):
    """Handle unexpected exceptions."""
    logger.exception("Unhandled exception: %s", exc)
    req_id = getattr(request.state, "request_id", None)
    if settings.debug:
        content = {
            "detail": str(exc),
            "type": type(exc).__name__,
            "request_id": req_id,
        }
    else:
        content = {"detail": "Internal server error", "request_id": req_id}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
        headers=_error_headers(request),
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check application health."""
    return HealthResponse(
        status="ok",
        version=settings.version,
        database="connected",
        notifications_pending=get_outbox().pending,
    )


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.project_name,
        "version": settings.version,
        "docs": "/docs" if settings.debug else "disabled",
        "api": {
            "v1": settings.api_v1_prefix,
        },
    }


app.include_router(
    api_v1_router,
    prefix=settings.api_v1_prefix,
)


# Main entry point for development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "forum_trust.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
