"""
Notes API — FastAPI Application Factory
=========================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes configuration, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance
       built around a single NoteGateway.
Who:   Called by uvicorn (uvicorn app.main:app) or run() below.
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  CORS        │→│ Req ID   │→│  Logging        │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────────────┐ ┌──────────────┐  │
    │  │ /api/notes, /api/notes/tags  │ │ GET /health  │  │
    │  └──────────────────────────────┘ └──────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ NotFound→404 │ Database→500 │   │
    │  └──────────────────────────────────────────────┘   │
    │                                                     │
    │  Docs: /api-docs (Swagger UI), /api-docs/redoc      │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Ping the document store (failure is logged, never fatal)
    3. Log listening address and docs URL

    Shutdown:
    1. Close the document store client
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import __version__
from app.config import settings
from app.database import NoteGateway, create_gateway
from app.exceptions import DatabaseError, NotFoundError, ValidationError
from app.middleware.cors import CORS_HEADERS, CORSMiddleware
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import health, notes

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server error"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (container runtimes capture it)
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage application lifecycle: startup and shutdown procedures.

    Startup connectivity failure is non-fatal: the server still accepts
    requests, which fail with 500 until the store becomes reachable. The
    driver reconnects by itself.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Notes API starting up...")
    logger.info("Connecting to document store at %s", settings.mongodb_uri_masked)

    gateway: NoteGateway = app.state.gateway
    if await gateway.ping():
        logger.info("Document store connected.")
    else:
        logger.error("Could not connect to the document store.")
        logger.error("Make sure MongoDB is running and reachable; requests will fail until it is.")

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("API docs: http://localhost:%d/api-docs", settings.port)
    logger.info("=" * 60)

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Notes API shutting down...")
    await gateway.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _format_validation_errors(exc: RequestValidationError) -> str:
    """Flatten pydantic error entries into `loc: msg` pairs."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError          → 400 {message}
        RequestValidationError   → 400 {message, error}  (malformed body)
        NotFoundError            → 404 {message}
        DatabaseError            → 500 {message, error}
        HTTPException            → 404/405 {message}   (unknown path or method)
        Exception (fallback)     → 500 {message, error}
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(status_code=400, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Body is not JSON or has wrongly-typed fields: report as 400, not 422."""
        rid = request_id_var.get("")
        detail = _format_validation_errors(exc)
        logger.warning("[%s] Invalid request body: %s", rid, detail)
        return JSONResponse(
            status_code=400,
            content={"message": "Invalid request body", "error": detail},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"message": exc.message})

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Store failure: the driver's description is returned as `error`."""
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.description, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "message": SERVER_ERROR_MESSAGE,
                "error": exc.description or exc.message,
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Unknown path or method: same {message} body as every other error."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for unexpected errors.

        Starlette runs this handler outside the application middleware
        stack, so the CORS headers are attached here explicitly.
        """
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"message": SERVER_ERROR_MESSAGE, "error": str(exc)},
            headers=CORS_HEADERS,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(gateway: Optional[NoteGateway] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        gateway: Persistence gateway to serve requests from. When omitted, a
                 MongoNoteGateway is built from settings. Tests pass an
                 in-memory gateway here.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Notes API",
        description="API for managing notes: create, read, update, delete and search by tag.",
        version=__version__,
        contact={"name": "API Support"},
        servers=settings.openapi_servers,
        docs_url="/api-docs",
        redoc_url="/api-docs/redoc",
        openapi_url="/api-docs/openapi.json",
        lifespan=lifespan,
    )

    app.state.gateway = gateway if gateway is not None else create_gateway(settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition: last added runs first.
    # Execution order: CORS → RequestID → Logging → routes
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(CORSMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(notes.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `app.main:app` to be importable
app = create_app()


def run() -> None:
    """Start the server on the configured host and port."""
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
