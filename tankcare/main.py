"""
FastAPI application factory
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.sessions import SessionMiddleware

from tankcare.config import get_settings
from tankcare.domain.errors import (
    ConfigurationError,
    NotFoundError,
    TransientStoreError,
    ValidationError,
)
from tankcare.infrastructure.db.session import check_db_connection
from tankcare.api.v1 import schedules, events, notifications

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    from tankcare.application.scheduler import start_scheduler, shutdown_scheduler

    settings = get_settings()
    if settings.SCHEDULER_ENABLED:
        start_scheduler()
    try:
        yield
    finally:
        shutdown_scheduler()


def _register_error_handlers(app: FastAPI) -> None:
    """Map the scheduler's error taxonomy onto HTTP status codes"""

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        return JSONResponse({"error": str(exc)}, status_code=422)

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return JSONResponse({"error": str(exc)}, status_code=404)

    @app.exception_handler(TransientStoreError)
    async def store_unavailable(request: Request, exc: TransientStoreError):
        logger.warning("Store unavailable on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse({"error": "Temporary backend issue, try again"}, status_code=503)

    @app.exception_handler(ConfigurationError)
    async def misconfigured(request: Request, exc: ConfigurationError):
        logger.critical("Configuration error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse({"error": "Service misconfigured"}, status_code=500)


def create_app() -> FastAPI:
    """
    Application factory

    Returns:
        Configured FastAPI app
    """
    settings = get_settings()

    app = FastAPI(
        title="TankCare",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SECRET_KEY
    )

    _register_error_handlers(app)

    app.include_router(schedules.router)
    app.include_router(events.router)
    app.include_router(notifications.router)

    # Health checks
    @app.get("/health", response_class=PlainTextResponse, tags=["system"])
    def health():
        """Health check endpoint"""
        return "ok"

    @app.get("/ready", response_class=PlainTextResponse, tags=["system"])
    def ready():
        """Readiness check endpoint (checks database availability)"""
        check_db_connection()
        return "ok"

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "tankcare.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
