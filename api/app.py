"""FastAPI application for Folder Notes."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .database import Database
from .errors import NoteAppError, RecordValidationError
from .observability import initialize_observability
from .routes import auth_router, folders_router, health_router, notes_router

# Initialize logger
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    # Startup
    logger.info("api_starting")

    initialize_observability()
    await Database.connect(get_settings())
    logger.info("api_started")

    yield

    # Shutdown
    logger.info("api_shutting_down")
    await Database.disconnect()
    logger.info("api_shutdown_complete")


app = FastAPI(
    title="Folder Notes API",
    description="Colored folders of notes with inline images, date history and search",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(NoteAppError)
async def handle_domain_error(request: Request, exc: NoteAppError) -> JSONResponse:
    """Render domain errors as ``{"detail", "code"}`` with their HTTP status."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log("request_failed", path=request.url.path, code=exc.code, detail=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


_HTTP_ERROR_CODES = {401: "authentication_error", 403: "authentication_error", 404: "not_found"}


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Keep FastAPI's per-field error list but tag it like domain validation errors."""
    logger.warning("request_validation_failed", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=RecordValidationError.status_code,
        content={"detail": jsonable_encoder(exc.errors()), "code": RecordValidationError.code},
    )


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework and auth errors with a ``code`` as well."""
    code = _HTTP_ERROR_CODES.get(exc.status_code, "http_error")
    logger.warning("request_failed", path=request.url.path, code=code, detail=exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": code},
        headers=getattr(exc, "headers", None),
    )


# Instrument FastAPI with OpenTelemetry
FastAPIInstrumentor.instrument_app(app)

# Include routers
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(folders_router)
app.include_router(notes_router)
