"""
FastAPI application factory and main entry point.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from relay.api.envelope import failure_envelope
from relay.api.middleware import WideEventMiddleware
from relay.api.routes import ai, health, models
from relay.core.config import settings
from relay.core.exceptions import ProviderChainError, RelayException, ValidationError
from relay.core.logging import configure_logging
from relay.services.ai.models_registry import registry

# Configure structured logging with wide events support
configure_logging(
    json_logs=settings.use_json_logs,
    log_level="DEBUG" if settings.debug else settings.log_level,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    logger.info(
        "Starting AI relay",
        service=settings.app_name,
        version=settings.app_version,
        port=settings.port,
        models=len(registry),
        image_api=settings.image_api_url,
    )
    if settings.external_api_token is None:
        logger.info("EXTERNAL_API_TOKEN not set, default provider called without token")

    yield

    logger.info("Shutting down AI relay")


def _status_for(exc: RelayException) -> int:
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, ProviderChainError):
        return 200
    return 500


def _format_errors(exc: RequestValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    ]


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="AI provider dispatch and response normalization",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Wide Events middleware - canonical log line per request
    app.add_middleware(WideEventMiddleware)

    app.include_router(health.router, tags=["Health"])
    app.include_router(models.router, tags=["Models"])
    app.include_router(ai.router, tags=["AI"])

    # Exception Handlers
    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle malformed query parameters or JSON bodies"""
        details = _format_errors(exc)
        logger.warning("Validation error", url=request.url.path, errors=details)
        return JSONResponse(
            status_code=400,
            content=failure_envelope("Invalid request", details),
        )

    @app.exception_handler(RelayException)
    async def relay_exception_handler(request: Request, exc: RelayException):
        """Validation failures are 400; failed dispatches are reported in a 200 envelope"""
        status_code = _status_for(exc)
        log = logger.warning if status_code < 500 else logger.error
        log(
            "Request failed",
            url=request.url.path,
            error_type=type(exc).__name__,
            message=exc.message,
        )
        details = exc.details if isinstance(exc, ProviderChainError) else None
        return JSONResponse(
            status_code=status_code,
            content=failure_envelope(exc.message, details),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions"""
        logger.error("Unexpected error", url=request.url.path, error=str(exc), exc_info=True)

        # Don't expose internal details in production
        message = str(exc) if settings.debug else "An unexpected error occurred"

        return JSONResponse(
            status_code=500,
            content=failure_envelope(message),
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "relay.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
