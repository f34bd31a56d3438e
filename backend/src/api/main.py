"""
FastAPI application factory with CORS, error handlers, and middleware.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import inngest.fast_api
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.src.api.health import router as health_router
from backend.src.api.routes.products import router as products_router
from backend.src.core.config import settings
from backend.src.core.database import close_db, init_db
from backend.src.core.exceptions import APIException
from backend.src.core.inngest import inngest_client
from backend.src.core.logging import (
    clear_request_id,
    get_logger,
    set_request_id,
    setup_logging,
)
from backend.src.services.feed_client import feed_client
from backend.src.services.inngest_functions.sync_catalog import (
    run_catalog_sync,
    sync_catalog_function,
)

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager for startup and shutdown events.

    Args:
        app: FastAPI application instance
    """
    # Startup
    logger.info(
        "Starting Catalog Sync API",
        extra={
            "environment": settings.ENVIRONMENT,
            "debug": settings.DEBUG,
        },
    )

    if settings.AUTO_CREATE_TABLES:
        await init_db()

    startup_sync: Optional[asyncio.Task] = None
    if settings.CATALOG_SYNC_ON_STARTUP:
        startup_sync = asyncio.create_task(run_catalog_sync(trigger="startup"))

    logger.info("Application started successfully")

    yield

    # Shutdown
    logger.info("Shutting down application")
    if startup_sync is not None and not startup_sync.done():
        startup_sync.cancel()
    await feed_client.close()
    await close_db()
    logger.info("Application shutdown complete")


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Catalog Sync API",
        description="Product catalog with paginated search and periodic feed synchronization",
        version="0.1.0",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    configure_cors(app)
    register_middleware(app)
    register_exception_handlers(app)
    register_routes(app)

    return app


def configure_cors(app: FastAPI) -> None:
    """
    Configure CORS middleware.

    Args:
        app: FastAPI application
    """
    if isinstance(settings.CORS_ORIGINS, str):
        origins = [origin.strip() for origin in settings.CORS_ORIGINS.split(",")]
    else:
        origins = settings.CORS_ORIGINS

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    logger.info(
        "CORS configured",
        extra={"allowed_origins": origins},
    )


def register_middleware(app: FastAPI) -> None:
    """
    Register application middleware.

    Args:
        app: FastAPI application
    """

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Add request ID to all requests for tracing."""
        request_id = set_request_id(request.headers.get("X-Request-ID"))
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        finally:
            clear_request_id()

        response.headers["X-Request-ID"] = request_id
        return response

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log all requests with timing information."""
        start_time = time.time()

        logger.info(
            "Request started",
            extra={
                "method": request.method,
                "path": request.url.path,
                "client_ip": request.client.host if request.client else None,
            },
        )

        response = await call_next(request)

        duration_ms = round((time.time() - start_time) * 1000, 2)

        logger.info(
            "Request completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers["X-Response-Time"] = f"{duration_ms}ms"

        return response

    logger.info("Middleware registered")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers.

    Args:
        app: FastAPI application
    """

    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException):
        """Handle custom API exceptions."""
        logger.warning(
            "API exception occurred",
            extra={
                "error_code": exc.error_code,
                "status_code": exc.status_code,
                "error": exc.message,
                "path": request.url.path,
            },
        )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.message,
                "error_code": exc.error_code,
                "request_id": getattr(request.state, "request_id", None),
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions."""
        logger.warning(
            "HTTP exception occurred",
            extra={
                "status_code": exc.status_code,
                "detail": exc.detail,
                "path": request.url.path,
            },
        )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": getattr(request.state, "request_id", None),
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        errors = exc.errors()
        logger.warning(
            "Validation error occurred",
            extra={
                "errors": errors,
                "path": request.url.path,
            },
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": "Validation error",
                "errors": [
                    {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
                    for error in errors
                ],
                "request_id": getattr(request.state, "request_id", None),
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error(
            "Unexpected exception occurred",
            extra={
                "error": str(exc),
                "path": request.url.path,
            },
            exc_info=True,
        )

        # Don't expose internal errors in production
        detail = str(exc) if settings.DEBUG else "Internal server error"

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": detail,
                "error_code": "INTERNAL_SERVER_ERROR",
                "request_id": getattr(request.state, "request_id", None),
            },
        )

    logger.info("Exception handlers registered")


def register_routes(app: FastAPI) -> None:
    """
    Register API routes.

    Args:
        app: FastAPI application
    """
    # Health check routes (no /v1 prefix)
    app.include_router(health_router)

    app.include_router(products_router)

    # Inngest executes background functions through /api/inngest
    inngest.fast_api.serve(app, inngest_client, [sync_catalog_function])

    logger.info("Routes registered")


# Create application instance
app = create_application()


# Root endpoint
@app.get("/", tags=["Root"])
async def root() -> Dict[str, Any]:
    """
    Root endpoint with API information.

    Returns:
        API information
    """
    return {
        "name": "Catalog Sync API",
        "version": "0.1.0",
        "description": "Product catalog with periodic feed synchronization",
        "environment": settings.ENVIRONMENT,
        "docs": "/docs" if settings.DEBUG else None,
        "health": "/health",
    }


# Export app
__all__ = ["app", "create_application"]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "backend.src.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,
    )
