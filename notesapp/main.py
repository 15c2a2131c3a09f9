"""
Notes Backend - FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes configuration, resource wiring, middleware registration,
       route mounting and lifecycle management in one place.
How:   Factory pattern: create_app() builds the engine, session factory and
       services once, stores them on app.state and returns the configured app.
Who:   uvicorn (notesapp.main:app) and the test suite (create_app(...)).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │  Req ID  │→│  Access Logging │→│     CORS     │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌─────────────┐ ┌──────────────┐  │
    │  │ /api/auth/*  │ │ /api/notes* │ │ GET /health  │  │
    │  └──────────────┘ └─────────────┘ └──────────────┘  │
    │                                                     │
    │  app.state:                                         │
    │    settings, engine, session_factory,               │
    │    auth_service, note_service                       │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Report missing production configuration (does not abort)
    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from notesapp import __version__
from notesapp.config import Settings, get_settings
from notesapp.database import build_engine, build_session_factory, dispose_engine
from notesapp.exceptions import (
    DatabaseError,
    NotesAppError,
    UnauthorizedError,
    ValidationError,
)
from notesapp.logging_setup import setup_logging
from notesapp.middleware.logging import RequestLoggingMiddleware
from notesapp.middleware.request_id import RequestIDMiddleware, request_id_var
from notesapp.routes import auth, health, notes
from notesapp.services.auth_service import AuthService
from notesapp.services.email_service import EmailService
from notesapp.services.google_service import GoogleIdentityVerifier
from notesapp.services.note_service import NoteService
from notesapp.services.otp_service import OtpService
from notesapp.services.token_service import TokenService
from notesapp.services.user_service import UserService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("Notes Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Server still starts: health checks and development use keep working
        logger.error("Configuration error: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Notes Backend shutting down...")
    await dispose_engine(app.state.engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(
    error: str,
    message: str,
    details: Optional[dict] = None,
) -> dict:
    """The failure envelope shared by every handler."""
    return {
        "success": False,
        "error": error,
        "message": message,
        "details": details,
        "request_id": request_id_var.get(""),
    }


def _field_errors(exc: RequestValidationError) -> list:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "path", "query")]
        message = str(err.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": ".".join(loc) or "body", "message": message})
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError         → 400 validation_error (field-level details)
        RequestValidationError  → converted to ValidationError
        UnauthorizedError       → 401 (+ WWW-Authenticate: Bearer)
        DatabaseError           → 500 server_error (generic message)
        NotesAppError (base)    → exc.status_code / exc.error_code
        HTTPException           → its status (unknown routes → 404)
        Exception (fallback)    → 500 internal_server_error

    Security: responses never carry stack traces, SQL or exception context.
    Context is logged server-side.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s %s", request_id_var.get(""), exc.message, exc.errors)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.error_code, exc.message, {"errors": exc.errors}),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """FastAPI's schema failures are reported as our ValidationError."""
        return await handle_validation_error(request, ValidationError(errors=_field_errors(exc)))

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return JSONResponse(
            status_code=401,
            content=error_body(exc.error_code, exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Database error: generic message to user, details logged server-side."""
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(NotesAppError)
    async def handle_app_error(request: Request, exc: NotesAppError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.error_code, exc.message),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content=error_body("not_found", "Route not found"))
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body("http_error", str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for truly unexpected errors.

        Security: Stack trace is logged server-side ONLY (never in response).
        """
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=error_body("internal_server_error", "Internal server error"),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    identity_verifier: Optional[GoogleIdentityVerifier] = None,
    email_service: Optional[EmailService] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Process-scoped resources are built here, once, and parked on app.state:
    the engine, the session factory and every service. Tests pass their own
    settings, identity verifier and email service.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Notes API",
        description=(
            "Email one-time-passcode and Google sign-in with JWT bearer sessions, "
            "plus a per-user notes CRUD API."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Resources ─────────────────────────────────────────────────────────
    engine = build_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.auth_service = AuthService(
        otp_service=OtpService(settings),
        token_service=TokenService(settings),
        user_service=UserService(),
        email_service=email_service or EmailService(settings),
        identity_verifier=identity_verifier or GoogleIdentityVerifier(settings),
    )
    app.state.note_service = NoteService()

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(notes.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `notesapp.main:app` to be importable
app = create_app()
