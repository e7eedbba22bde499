"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from vendoriq import __version__
from vendoriq.api.middleware import (
    ErrorHandlingMiddleware,
    RequestContextMiddleware,
    RequestLoggingMiddleware,
    error_response,
)
from vendoriq.api.routers import health_router, v1_router
from vendoriq.api.schemas.errors import ErrorCode
from vendoriq.config.settings import Settings, get_settings
from vendoriq.core.logging import get_logger, setup_logging
from vendoriq.observability import get_metrics_manager
from vendoriq.risk.engine import RiskIntelligenceEngine

logger = get_logger("vendoriq.api")


def create_app(
    settings: Settings | None = None,
    engine: RiskIntelligenceEngine | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    This is the application factory that assembles all components:
    - Middleware (in correct order)
    - Routers
    - Exception handlers
    - Lifespan management

    Args:
        settings: Optional settings override (useful for testing)
        engine: Optional pre-built engine. When omitted, the lifespan
            builds one over the SQL history repository.

    Returns:
        Configured FastAPI application

    Example:
        # Production
        app = create_app()

        # Testing
        repository = InMemoryHistoryRepository()
        app = create_app(engine=RiskIntelligenceEngine(repository))

        # Run with uvicorn
        uvicorn vendoriq.api.app:create_app --factory
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="VendorIQ API",
        description="Vendor risk intelligence API",
        version=__version__,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=_lifespan,
    )

    # Store settings and engine on app state for access in dependencies
    app.state.settings = settings
    app.state.risk_engine = engine

    _configure_middleware(app, settings)
    _configure_exception_handlers(app)
    _configure_routers(app)

    return app


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Configures logging and metrics and, when no engine was supplied, the database
    backed engine. Disposes the database engine on shutdown.

    Args:
        app: FastAPI application

    Yields:
        None (context for application lifetime)
    """
    settings: Settings = app.state.settings
    setup_logging(log_level=settings.log_level)
    logger.info("Starting VendorIQ API", environment=settings.ENVIRONMENT)

    get_metrics_manager().initialize(
        service_name="vendoriq",
        service_version=__version__,
        environment=settings.ENVIRONMENT,
    )

    owns_database = app.state.risk_engine is None
    if owns_database:
        from vendoriq.db.config import get_session_factory, init_db
        from vendoriq.db.repositories import SQLHistoryRepository

        await init_db(create_tables=settings.ENVIRONMENT in ("development", "test"))
        app.state.risk_engine = RiskIntelligenceEngine(
            SQLHistoryRepository(get_session_factory()),
            config=settings.engine,
        )
        logger.info("Database connection pool initialized")

    yield

    logger.info("Shutting down VendorIQ API")
    if owns_database:
        from vendoriq.db.config import close_db

        await close_db()
        app.state.risk_engine = None
        logger.info("Database connections closed")


def _configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure middleware stack.

    Middleware order (outermost to innermost execution):
    1. RequestContextMiddleware - Assigns the request ID
    2. RequestLoggingMiddleware - Logs all requests
    3. ErrorHandlingMiddleware - Converts exceptions to HTTP responses

    Note: Middleware is added in reverse order because Starlette
    processes them from last-added to first-added.
    """
    app.add_middleware(ErrorHandlingMiddleware, debug=settings.DEBUG)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestContextMiddleware)


def _configure_exception_handlers(app: FastAPI) -> None:
    """Render request validation failures with the APIError schema."""

    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
            for e in exc.errors()
        ]
        return error_response(
            request, ErrorCode.VALIDATION_ERROR, "Request validation failed", {"errors": errors}
        )

    app.add_exception_handler(RequestValidationError, request_validation_handler)


def _configure_routers(app: FastAPI) -> None:
    """Configure API routers."""
    # Health check and metrics endpoints (no prefix - at root level)
    app.include_router(health_router)

    # API v1 routers
    app.include_router(v1_router)
