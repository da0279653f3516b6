# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from permit_db import SessionLocal, get_db_service
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .middleware.feature import require_permohonan_enabled
from .routes import catalog, health, permohonan
from .schemas.error import ErrorResponse
from .services.audit import AuditEventSink
from .services.errors import CompletenessError, PermitError, ValidationError
from .services.events import init_event_dispatcher
from .services.requirements import init_requirement_registry
from .services.review_queue import ReviewQueueSink
from .services.storage import init_storage_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup/shutdown lifecycle."""
    logger.info(
        "Starting %s (env=%s, permohonan_enabled=%s)",
        settings.APP_NAME,
        settings.APP_ENV,
        settings.PERMOHONAN_ENABLED,
    )
    init_storage_service(settings)
    init_requirement_registry(settings)
    dispatcher = init_event_dispatcher(
        [AuditEventSink(SessionLocal, max_attempts=settings.AUDIT_MAX_ATTEMPTS)]
    )
    if settings.REVIEW_QUEUE_URL:
        dispatcher.subscribe(
            ReviewQueueSink(
                settings.REVIEW_QUEUE_URL,
                timeout=settings.REVIEW_QUEUE_TIMEOUT,
                max_attempts=settings.AUDIT_MAX_ATTEMPTS,
            )
        )
        logger.info("Review queue forwarding enabled (%s)", settings.REVIEW_QUEUE_URL)
    yield
    await dispatcher.drain()
    await get_db_service().close()


app = FastAPI(
    title="Permit Application API",
    description="Business license application lifecycle: drafts, documents and submission",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

_HTTP_STATUS_TITLES: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    413: "Payload Too Large",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", str(uuid.uuid4()))


def _build_error(status_code: int, detail: str, request_id: str, **extensions) -> ErrorResponse:
    return ErrorResponse(
        type="about:blank",
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        request_id=request_id,
        **extensions,
    )


def _problem(body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=body.status, content=body.model_dump(exclude_none=True))


@app.exception_handler(PermitError)
async def permit_error_handler(request: Request, exc: PermitError):
    """Render domain errors as RFC 7807 Problem Details with extension members."""
    extensions: dict = {"error_code": exc.error_code, "instance": request.url.path}
    if isinstance(exc, ValidationError):
        extensions["errors"] = exc.errors
    if isinstance(exc, CompletenessError):
        extensions["missing_requirement_ids"] = exc.missing_requirement_ids
    body = _build_error(exc.status_code, exc.message, _request_id(request), **extensions)
    return _problem(body)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    body = _build_error(exc.status_code, str(exc.detail), _request_id(request))
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors to RFC 7807 Problem Details."""
    errors = {
        ".".join(str(part) for part in err["loc"] if part != "body"): err["msg"]
        for err in exc.errors()
    }
    body = _build_error(
        422,
        "The given data was invalid.",
        _request_id(request),
        error_code="validation_failed",
        errors=errors,
    )
    return _problem(body)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    request_id = _request_id(request)
    logger.exception("Unhandled exception (request_id=%s)", request_id)
    return _problem(_build_error(500, "An unexpected error occurred.", request_id))


# Include routers. The feature gate is a router dependency so it runs
# before any endpoint dependency, authentication included.
_gated = [Depends(require_permohonan_enabled)]

app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(
    permohonan.router, prefix="/permohonan", tags=["permohonan"], dependencies=_gated
)
app.include_router(catalog.router, prefix="/katalog", tags=["katalog"], dependencies=_gated)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {"message": f"Welcome to {settings.APP_NAME}"}
