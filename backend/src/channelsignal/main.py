"""ChannelSignal Backend - FastAPI application

Receives inbound email webhooks for sales reps and turns mail BCC'd to a
rep's routing address into orgs, contacts, meetings and email records.

Run with:
    uvicorn channelsignal.main:app
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from . import __version__
from .api.inbound_email.router import router as inbound_email_router
from .config import Settings, settings
from .database import engine
from .observability.logging_config import configure_logging
from .observability.middleware import RequestIDMiddleware
from .observability.router import router as observability_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the effective configuration on startup; release DB connections on shutdown."""
    logger.info(f"ChannelSignal API starting ({settings.ENVIRONMENT})")
    logger.info(f"Routing addresses on {settings.INBOUND_EMAIL_DOMAIN}")
    if not settings.INBOUND_EMAIL_WEBHOOK_SECRET:
        logger.warning("INBOUND_EMAIL_WEBHOOK_SECRET not set")
    if not settings.RESEND_API_KEY:
        logger.warning("RESEND_API_KEY not set, outgoing mail is only logged")

    yield

    logger.info("ChannelSignal API shutting down")
    await engine.dispose()


def _error_response(status_code: int, error: str, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, **extra},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map uncaught errors to generic JSON bodies; details go to the log only."""

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning(f"Validation error on {request.method} {request.url.path}")
        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "validation_error",
            "Request validation failed",
            details=exc.errors(),
        )

    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "database_error",
            "A database error occurred. Please try again later.",
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "internal_error",
            "An unexpected error occurred. Please try again later.",
        )


def create_app(config: Settings = settings) -> FastAPI:
    """Build the application: logging, middleware, error handlers and routers."""
    configure_logging(level=config.LOG_LEVEL, json_format=config.LOG_JSON)

    docs_enabled = config.ENVIRONMENT != "production"
    application = FastAPI(
        title="ChannelSignal API",
        description="Inbound email ingestion for sales teams",
        version=__version__,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )

    application.add_middleware(RequestIDMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    register_exception_handlers(application)

    application.include_router(observability_router)
    application.include_router(inbound_email_router, prefix="/api")

    @application.get("/", include_in_schema=False)
    async def root() -> dict[str, Any]:
        return {
            "name": "ChannelSignal API",
            "version": __version__,
            "status": "running",
            "docs": "/docs" if docs_enabled else None,
        }

    return application


app = create_app()
