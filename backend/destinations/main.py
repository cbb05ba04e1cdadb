"""
FastAPI Main Application

Entry point for the Destinations API server.
Configures routing, middleware, error rendering and application lifecycle.
"""

from typing import Dict, Any, Optional
import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from destinations.core.config import Settings, get_settings
from destinations.core.container import build_container
from destinations.core.exceptions import BaseApplicationException, ValidationException
from destinations.api import (
    cities_router,
    seasons_router,
    jobs_router,
    health_router,
    metrics_router,
)
from destinations.middleware.monitoring import MonitoringMiddleware
from destinations.schemas.common import format_validation_errors
from destinations.utils.logger import configure_logging, get_logger, log_error

# Initialize logger
logger = get_logger(__name__)


def _error_code_for_status(status_code: int) -> str:
    return {
        404: "RESOURCE_NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
    }.get(status_code, "HTTP_ERROR")


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Render every failure with the same error envelope."""

    @app.exception_handler(BaseApplicationException)
    async def application_exception_handler(
        request: Request, exc: BaseApplicationException
    ) -> JSONResponse:
        """Handle domain exceptions."""
        if exc.http_status >= 500:
            log_error(exc, {"path": request.url.path, "method": request.method})
        else:
            logger.info(
                "Request rejected",
                path=request.url.path,
                status_code=exc.http_status,
                error_code=exc.error_code,
            )
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors."""
        error = ValidationException(
            "Invalid request data",
            field_errors=format_validation_errors(exc.errors()),
        )
        logger.warning("Validation error", path=request.url.path, errors=error.field_errors)
        return JSONResponse(status_code=error.http_status, content=error.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error_code": _error_code_for_status(exc.status_code),
                "message": str(exc.detail),
                "details": {},
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler."""
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )

        content: Dict[str, Any] = {
            "error_code": "INTERNAL_ERROR",
            "message": "Internal server error",
            "details": {},
        }
        # Don't expose internal errors in production
        if not settings.is_production:
            content["details"] = {"error": str(exc), "type": type(exc).__name__}
        return JSONResponse(status_code=500, content=content)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build a FastAPI application wired to its own container.

    Args:
        settings: Settings to use; defaults to the cached environment settings

    Returns:
        FastAPI: Configured application
    """
    settings = settings or get_settings()
    configure_logging(settings)

    container = build_container(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting Destinations API...", environment=settings.ENVIRONMENT)
        try:
            await container.initialize()
        except Exception as e:
            logger.error("Container initialization failed", error=str(e))
            raise

        yield

        logger.info("Shutting down Destinations API...")
        try:
            await container.shutdown()
        except Exception as e:
            logger.warning("Error during shutdown", error=str(e))
        logger.info("Application shutdown complete")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Cities and seasonal travel windows, with asynchronous batch import",
        version=settings.VERSION,
        docs_url="/api-docs",
        redoc_url=None,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.container = container
    app.state.settings = settings

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins_list(),
        allow_methods=settings.get_cors_methods_list(),
        allow_headers=settings.get_cors_headers_list(),
        expose_headers=["ETag", "Location", "X-Request-ID"],
    )
    app.add_middleware(MonitoringMiddleware)

    register_exception_handlers(app, settings)

    # Include API routers
    app.include_router(health_router)
    app.include_router(cities_router)
    app.include_router(seasons_router)
    app.include_router(jobs_router)
    app.include_router(metrics_router)

    @app.get("/", tags=["root"])
    async def root() -> Dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "message": settings.APP_NAME,
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "status": "running",
            "docs_url": "/api-docs",
            "health_url": "/health",
            "endpoints": {
                "cities": "/cities",
                "seasons": "/seasons",
                "jobs": "/jobs/{id}",
                "metrics": "/metrics",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "destinations.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
