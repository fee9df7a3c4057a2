import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from scrapbook_api.api import auth, pages, scrapbooks, songs
from scrapbook_api.config import get_settings
from scrapbook_api.exceptions import ScrapbookError, StorageError
from scrapbook_api.middleware.request_context import (
    REQUEST_ID_HEADER,
    build_meta,
    context_for,
    request_context_middleware,
)
from scrapbook_api.models.database import engine, init_db
from scrapbook_api.schemas.envelope import ErrorEnvelope, ErrorInfo, ErrorLocation

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    await init_db()
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER],
)
app.middleware("http")(request_context_middleware)


def _http_error_code(status_code: int) -> str:
    mapping = {
        400: "BAD_REQUEST",
        401: "UNAUTHENTICATED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        422: "VALIDATION_ERROR",
        500: "INTERNAL_ERROR",
        503: "STORAGE_ERROR",
    }
    return mapping.get(status_code, "HTTP_ERROR")


def _envelope_response(
    request: Request,
    status_code: int,
    error: ErrorInfo,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    context = context_for(request)
    envelope = ErrorEnvelope(
        request_id=context.request_id,
        error=error,
        meta=build_meta(context),
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope.model_dump(exclude_none=True)),
        headers=headers,
    )


@app.exception_handler(ScrapbookError)
async def scrapbook_exception_handler(request: Request, exc: ScrapbookError) -> JSONResponse:
    return _envelope_response(request, exc.status_code, exc.to_error_info())


@app.exception_handler(SQLAlchemyError)
async def storage_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(f"Storage failure on {request.method} {request.url.path}: {exc}")
    return _envelope_response(request, 503, StorageError().to_error_info())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report the first validation problem as a VALIDATION_ERROR envelope."""
    errors = exc.errors()
    location = None
    if errors:
        first_error = errors[0]
        # Drop the "body"/"query"/"path" prefix
        parts = [str(x) for x in first_error.get("loc", ())][1:]
        field = ".".join(parts) or None
        msg = first_error.get("msg", "Validation error")
        message = f"{field}: {msg}" if field else msg
        location = ErrorLocation(field=field) if field else None
    else:
        message = "Request validation failed"

    error = ScrapbookError(
        message, code="VALIDATION_ERROR", status_code=422, location=location
    ).to_error_info()
    return _envelope_response(request, 422, error)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    error_code = _http_error_code(exc.status_code)
    error = ScrapbookError(str(exc.detail), code=error_code, status_code=exc.status_code).to_error_info()
    return _envelope_response(request, exc.status_code, error, headers=exc.headers)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled exception: {exc}")
    error = ScrapbookError("Internal server error").to_error_info()
    return _envelope_response(request, 500, error)


# Routers
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(scrapbooks.router, prefix="/api/scrapbooks", tags=["scrapbooks"])
app.include_router(pages.router, prefix="/api/pages", tags=["pages"])
app.include_router(songs.router, prefix="/api/songs", tags=["songs"])


@app.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy", "version": settings.app_version}
