"""
FastAPI Application Entry Point

Am Thuc Phuong Nam - restaurant REST API.

Endpoints:
    - /api/datban: Table reservations
    - /api/foods: Menu items
    - /api/categories: Menu categories
    - /api/customers: Customer accounts and authentication
    - /api/chat: AI assistant
    - GET /health: System health check

Run:
    uvicorn phuongnam.main:app --reload
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from phuongnam.api import ROUTERS
from phuongnam.core.config import Settings, get_settings, setup_logging
from phuongnam.core.exceptions import AppError
from phuongnam.core.responses import error_response
from phuongnam.core.security import TokenService
from phuongnam.database import create_engine, create_session_maker, init_db
from phuongnam.services.ai import create_chat_service
from phuongnam.services.categories import CategoryService
from phuongnam.services.customers import CustomerService
from phuongnam.services.foods import FoodService
from phuongnam.services.reservations import ReservationService

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


# =============================================================================
# ERROR TRANSLATION
# =============================================================================

def format_validation_errors(exc: RequestValidationError) -> list[str]:
    """Pydantic errors as ``field: message`` strings."""
    messages = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        msg = error.get("msg", "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        messages.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return messages


def classify_integrity_error(exc: IntegrityError) -> tuple[int, str, str]:
    """Map a constraint violation onto (status, code, message)."""
    text = str(exc.orig).lower()
    if "unique" in text or "duplicate" in text:
        return 409, "DUPLICATE_ENTRY", "Resource already exists"
    if "foreign key" in text:
        return 400, "FOREIGN_KEY_CONSTRAINT", "Referenced resource does not exist"
    return 500, "DATABASE_ERROR", "Database constraint violated"


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Every error leaves the API in the standard error envelope."""

    def details(exc: Exception) -> Optional[str]:
        return None if settings.is_production else str(exc)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path}: {exc.code} {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(
                exc.message,
                code=exc.code,
                errors=exc.errors,
                details=None if settings.is_production else exc.details,
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content=error_response(
                "Invalid request data",
                code="VALIDATION_ERROR",
                errors=format_validation_errors(exc),
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404 and exc.detail == "Not Found":
            message = f"Route not found: {request.method} {request.url.path}"
        else:
            message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(message, code=HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
        status, code, message = classify_integrity_error(exc)
        logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
        return JSONResponse(
            status_code=status,
            content=error_response(message, code=code, details=details(exc.orig)),
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception(f"Database error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content=error_response("Database error", code="DATABASE_ERROR", details=details(exc)),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all exception handler."""
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content=error_response(
                "An unexpected error occurred",
                code="INTERNAL_ERROR",
                details=details(exc),
            ),
        )


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Engine, session factory and services are created here and kept on
    ``app.state``; the lifespan only creates tables and releases resources.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    engine = create_engine(settings)
    tokens = TokenService(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application startup and shutdown events.
        """
        # Startup
        logger.info("=" * 60)
        logger.info(f"Starting {settings.app_name}")
        logger.info(f"   Version: {settings.app_version}")
        logger.info(f"   Environment: {settings.env_mode.value}")
        logger.info(f"   Debug: {settings.debug}")
        logger.info("=" * 60)

        await init_db(engine)

        missing = settings.validate_production_config()
        for key in missing:
            logger.warning(f"Missing production config: {key}")

        ai = app.state.chat.status()
        logger.info(f"Chat provider: {ai['primary']}")
        logger.info("Application ready")

        yield  # Application runs

        # Shutdown
        logger.info("Shutting down...")
        await app.state.chat.aclose()
        await engine.dispose()
        logger.info("Cleanup complete")

    app = FastAPI(
        title=settings.app_name,
        description="REST API for the Am Thuc Phuong Nam restaurant: menu, reservations, customers and AI chat.",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_maker = create_session_maker(engine)
    app.state.tokens = tokens
    app.state.reservations = ReservationService(settings)
    app.state.foods = FoodService(settings)
    app.state.categories = CategoryService(settings)
    app.state.customers = CustomerService(tokens)
    app.state.chat = create_chat_service(settings)

    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Total-Count"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
        response.headers["X-Response-Time"] = f"{elapsed_ms:.1f}ms"
        return response

    register_exception_handlers(app, settings)

    for router in ROUTERS:
        app.include_router(router)

    return app


app = create_app()
