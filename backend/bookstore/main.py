"""
Bookstore Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes configuration, middleware registration, route mounting,
       error mapping and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn bookstore.main:app) and by the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │ Req ID   │→│  Access Logging │→│  CORS        │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                 → Trailing-slash normalisation      │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │ /books CRUD  │ │ /health  │ │ catch-all → 404 │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Error Mapping (one envelope for everything):       │
    │  ┌───────────────────────────────────────────────┐  │
    │  │ {"error": {"message": ..., "status": ...}}    │  │
    │  └───────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, optionally create tables, log readiness
    Shutdown: dispose the database engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional, Union

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bookstore import __version__
from bookstore.config import Settings, settings as default_settings
from bookstore.database import Database
from bookstore.exceptions import BookstoreError, RouteNotFoundError
from bookstore.middleware.logging import RequestLoggingMiddleware
from bookstore.middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIDMiddleware,
    request_id_var,
)
from bookstore.middleware.trailing_slash import TrailingSlashMiddleware
from bookstore.routes import books, health

logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,  # Override any existing logging config
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage application lifecycle.

    The Database resource is built by create_app(); the lifespan only
    prepares it and releases it, so apps driven without lifespan events
    (ASGI test transports) still have a working database.
    """
    settings: Settings = app.state.settings
    database: Database = app.state.database

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("Bookstore Backend %s starting up...", __version__)

    if settings.auto_create_tables:
        await database.create_all()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Bookstore Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    status_code: int,
    message: Union[str, List[str]],
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Render the error envelope shared by every failure."""
    return JSONResponse(
        status_code=status_code,
        content={"error": {"message": message, "status": status_code}},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register the terminal error mapper.

    Handler hierarchy:
        BookstoreError        → exc.status_code, exc.message
        HTTPException         → exc.status_code, exc.detail
        Exception (fallback)  → 500, generic message

    Context dicts and stack traces are logged server-side only.
    """

    @app.exception_handler(BookstoreError)
    async def handle_bookstore_error(request: Request, exc: BookstoreError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s",
                rid, type(exc).__name__, exc.message, exc.context,
            )
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, exc.detail, headers=exc.headers)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for truly unexpected errors.

        Stack trace is logged server-side ONLY (never in response).

        Starlette runs this handler in ServerErrorMiddleware, outside
        RequestIDMiddleware, so the header is set here.
        """
        rid = getattr(request.state, "request_id", "") or request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        headers = {REQUEST_ID_HEADER: rid} if rid else None
        return error_response(500, "An unexpected error occurred", headers=headers)


def register_fallback_route(app: FastAPI) -> None:
    """
    Answer every unmatched path, whatever the method, with a 404 envelope.

    Must be registered after all other routes.
    """

    @app.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
    async def route_not_found(path: str) -> Any:
        raise RouteNotFoundError(path=f"/{path}")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Explicit configuration; defaults to the environment-derived
                  `bookstore.config.settings`.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Bookstore API",
        description="CRUD API for a catalogue of books, keyed by ISBN.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = Database(settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS → TrailingSlash → routes
    app.add_middleware(TrailingSlashMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(books.router)
    app.include_router(health.router)
    register_fallback_route(app)

    return app


# uvicorn expects `bookstore.main:app` to be importable
app = create_app()
