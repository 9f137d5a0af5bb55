"""
Arduino Relay - FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes configuration, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn relay.main:app) or by run() below.
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │  Req ID  │→│  Logging        │→│  CORS (*)    │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────────────────┐ ┌─────────────────┐         │
    │  │ POST /arduino-data │ │ GET /health     │         │
    │  └────────────────────┘ └─────────────────┘         │
    │                                                     │
    │  app.state:                                         │
    │    settings  → Settings                             │
    │    data_sink → FirebaseDataSink (one per process)   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (log problems, keep serving)
    3. Connect the Firebase sink unless one was injected
    Shutdown:
    1. Delete the Firebase app the lifespan created
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from relay import __version__
from relay.config import Settings, get_settings
from relay.exceptions import ConfigurationError, RelayError, ValidationError
from relay.middleware.logging import RequestLoggingMiddleware
from relay.middleware.request_id import RequestIDMiddleware, request_id_var
from relay.routes import health, ingest
from relay.services.data_sink import DataSink, FirebaseDataSink

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout, so container runtimes pick it up.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access middleware already logs every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    # firebase_admin rides on google-auth/urllib3, both chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("google.auth").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: build and connect the Firebase sink. Shutdown: release it.

    A sink injected through create_app(data_sink=...) is used as-is and is
    not closed here; whoever injected it owns it.

    A configuration failure does not stop the process. The sink stays
    unconnected, every POST returns the fixed 500 body, and /health
    reports unhealthy until the process is restarted with valid settings.
    """
    settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings)
    logger.info("=" * 60)
    logger.info("Arduino Relay %s starting up...", __version__)

    owned_sink: Optional[FirebaseDataSink] = None
    if getattr(app.state, "data_sink", None) is None:
        try:
            settings.validate_for_startup()
        except ValueError as e:
            logger.error("%s", str(e))

        owned_sink = FirebaseDataSink.from_settings(settings)
        try:
            owned_sink.connect()
        except ConfigurationError as e:
            logger.error("Firebase initialization failed: %s | Context: %s", e.message, e.context)
            logger.error("Writes will fail until the configuration is fixed and the server restarted.")
        app.state.data_sink = owned_sink

    logger.info("Server running on port %d", settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Arduino Relay shutting down...")
    if owned_sink is not None:
        await owned_sink.close()
        app.state.data_sink = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP responses.

    Handler hierarchy:
        RequestValidationError → 400 (FastAPI could not decode the JSON body)
        ValidationError        → 400 (body arrived with a non-JSON content type)
        RelayError (base)      → 500
        Exception (fallback)   → 500

    Failed Firebase writes never reach these handlers: the ingest route
    turns WriteFailed into its own fixed 500 body.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Malformed, empty, or null JSON body."""
        rid = request_id_var.get("")
        logger.warning("[%s] Rejected request body: %s", rid, exc.errors())
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": "Request body must be valid JSON",
                "request_id": rid,
            },
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(RelayError)
    async def handle_relay_error(request: Request, exc: RelayError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all; stack trace is logged server-side only."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    data_sink: Optional[DataSink] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration to use. Defaults to get_settings() (environment).
        data_sink: Pre-built sink. When given, the lifespan does not create or
            close a Firebase sink. Tests pass an in-memory sink here.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Arduino Relay",
        description=(
            "Accepts JSON payloads from sensor devices and appends them to a "
            "Firebase Realtime Database, returning the generated record key."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.data_sink = data_sink

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS → route

    # CORS - any origin, no credentials (browsers reject "*" with credentials)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(ingest.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console entry point: serve the relay on HOST:PORT (PORT defaults to 3000)."""
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


# uvicorn expects `relay.main:app` to be importable
app = create_app()
