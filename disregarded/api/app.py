"""
FastAPI application for the essay service.

`create_app()` builds every service eagerly from an immutable Settings
object, so a missing signing secret stops the process before it serves
a single request.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from disregarded.api.documents import router as documents_router
from disregarded.auth import CredentialStore, PasswordHasher, TokenService, auth_router
from disregarded.config import Settings, get_settings
from disregarded.core.errors import AppError
from disregarded.integrations.sentry import init_sentry
from disregarded.services.essays import EssayService
from disregarded.storage import create_sqlite_storage

logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(f"Essay API starting in {settings.environment} mode")

    yield

    logger.info("Essay API shutting down")


# =============================================================================
# Error Handlers
# =============================================================================


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return _error(exc.status_code, exc.message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        detail = errors[0].get("msg", "invalid value")
        message = f"Invalid request: {location}: {detail}" if location else f"Invalid request: {detail}"
    else:
        message = "Invalid request"
    return _error(400, message)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Details stay in the server log
    logger.exception(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return _error(500, "Internal server error")


# =============================================================================
# App Factory
# =============================================================================


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application and all of its services."""
    settings = settings or get_settings()

    if init_sentry(settings):
        logger.info("Sentry error tracking enabled")

    storage = create_sqlite_storage(settings.database_path)

    tokens = TokenService(
        secret=settings.jwt_secret,
        lifetime_seconds=settings.jwt_expiry,
    )
    logger.info(
        f"Token expiry: {settings.jwt_expiry} seconds "
        f"({settings.jwt_expiry / 3600:.1f} hours)"
    )

    credentials = CredentialStore(
        storage.accounts,
        PasswordHasher(
            memory_cost=settings.argon2_memory_cost,
            time_cost=settings.argon2_time_cost,
            parallelism=settings.argon2_parallelism,
        ),
        registration_enabled=settings.registration_enabled,
    )
    if not settings.registration_enabled:
        logger.warning("Registration is disabled")

    essays = EssayService(
        storage.essays,
        max_length=settings.max_essay_length,
        id_length=settings.essay_id_length,
        id_max_attempts=settings.essay_id_max_attempts,
    )

    app = FastAPI(
        title="Disregarded API",
        description="Write essays, keep them as drafts, publish them when ready",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.storage = storage
    app.state.tokens = tokens
    app.state.credentials = credentials
    app.state.essays = essays

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth_router)
    app.include_router(documents_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "disregarded-api"}

    return app
