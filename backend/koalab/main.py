"""
Koalab Backend: FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) registers middleware, exception handlers and
       routers; the lifespan builds the AppContext on startup and releases
       it on shutdown.
Who:   uvicorn (koalab.main:app) and the `koalab` console script.

Lifecycle:
    Startup (any failure aborts the process):
    1. Configure logging
    2. Load or generate the session secret
    3. Connect to the store and create missing tables
    4. Open the identity verifier's HTTP client
    5. Publish the AppContext on app.state

    Shutdown:
    1. Close the verifier's HTTP client
    2. Dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from koalab import __version__
from koalab.config import Settings, settings as default_settings
from koalab.context import AppContext
from koalab.database import build_engine, build_session_factory, create_schema
from koalab.exceptions import (
    AuthenticationError,
    InfrastructureError,
    NotFoundError,
    StartupError,
    ValidationError,
)
from koalab.middleware.logging import RequestLoggingMiddleware
from koalab.middleware.request_id import RequestIDMiddleware, request_id_var
from koalab.routes import boards, health, user
from koalab.services.identity_verifier import IdentityVerifier
from koalab.services.session_codec import SessionCodec, load_or_create_secret

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure the root logger once at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s on stdout.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the AppContext on startup; release its resources on shutdown."""
    settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("Koalab backend starting up...")

    try:
        secret = await load_or_create_secret(settings.secret_file)
    except StartupError as e:
        logger.critical("%s", e.message)
        raise

    engine = build_engine(settings)
    safe_url = engine.url.render_as_string(hide_password=True)
    try:
        await create_schema(engine)
    except Exception as e:
        await engine.dispose()
        logger.critical("Can't connect to the database at %s: %s", safe_url, str(e))
        raise StartupError(
            message=f"Can't connect to the database at {safe_url}",
            context={"error_type": type(e).__name__},
        ) from e
    logger.info("Connected to the database at %s", safe_url)

    verifier = IdentityVerifier(
        verifier_url=settings.verifier_url,
        audience=settings.public_url,
        timeout=settings.verifier_timeout,
    )

    app.state.context = AppContext(
        settings=settings,
        codec=SessionCodec(secret, max_age=settings.session_max_age),
        verifier=verifier,
        engine=engine,
        session_factory=build_session_factory(engine),
    )
    logger.info("Public URL (verification audience): %s", settings.public_url)
    logger.info("Listening on http://%s:%d/", settings.backend_host, settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Koalab backend shutting down...")
    await app.state.context.verifier.aclose()
    await app.state.context.engine.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, error: str, message: str, details=None) -> JSONResponse:
    content = {
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def _validation_response(exc: ValidationError) -> JSONResponse:
    logger.warning("Validation error: %s | Context: %s", exc.message, exc.context)
    return _error_response(400, "validation_error", exc.message, exc.context)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the JSON error envelope.

    Handler hierarchy:
        RequestValidationError (as ValidationError) → 400
        AuthenticationError                         → 403
        NotFoundError                               → 404
        InfrastructureError                         → 500 (details logged only)
        Exception                                   → 500
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": str(err.get("msg", ""))}
            for err in exc.errors()
        ]
        field = errors[0]["loc"][-1] if errors and errors[0]["loc"] else None
        return _validation_response(
            ValidationError(
                message="Malformed request body",
                field=field,
                context={"path": request.url.path, "errors": errors},
            )
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        logger.info("Authentication refused on %s: %s", request.url.path, exc.context)
        return _error_response(403, "authentication_error", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(InfrastructureError)
    async def handle_infrastructure_error(request: Request, exc: InfrastructureError):
        logger.error("%s: %s | Context: %s", type(exc).__name__, exc.message, exc.context)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Explicit configuration (tests); defaults to the
                  environment-derived settings.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Koalab API",
        description="Boards and postits for a collaborative whiteboard, behind Persona sign-in.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Middleware executes in reverse order of addition:
    # RequestID → Logging → CORS → routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(user.router)
    app.include_router(boards.router)
    app.include_router(health.router)

    return app


app = create_app()
