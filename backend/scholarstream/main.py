"""
Scholar Stream Backend: FastAPI Application Factory
====================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers and routers;
       the lifespan handler owns the MongoDB client.
Who:   uvicorn (`uvicorn scholarstream.main:app`) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌────────┐ ┌─────────┐ ┌──────┐ ┌──────┐ ┌───────────┐  │
    │  │ Req ID │→│ Logging │→│ GZip │→│ CORS │→│ Unhandled │  │
    │  └────────┘ └─────────┘ └──────┘ └──────┘ └───────────┘  │
    │                                                          │
    │  Routers:                                                │
    │  health · users · scholarships · applications · reviews  │
    │  · checkout                                              │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Validation→400 │ Auth→401 │ Token/Role→403 │ 404 │ 500  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Validate configuration (logged, not fatal)
    3. Create the MongoStore and verify connectivity with retries
       (a failed check is logged; requests will surface DatabaseError)

    Shutdown:
    1. Close the MongoDB client
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from scholarstream import __version__
from scholarstream.config import settings
from scholarstream.database import create_store
from scholarstream.exceptions import (
    AuthenticationError,
    DatabaseError,
    ForbiddenError,
    InvalidTokenError,
    NotFoundError,
    PaymentProviderError,
    ScholarStreamError,
    ValidationError,
)
from scholarstream.middleware.errors import UnhandledErrorMiddleware, error_response, unexpected_error_response
from scholarstream.middleware.logging import RequestLoggingMiddleware
from scholarstream.middleware.request_id import RequestIDMiddleware, request_id_var
from scholarstream.routes import applications, checkout, health, reviews, scholarships, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once for the whole process.

    Format: 2025-01-15T12:00:00 [INFO] scholarstream.access: GET /scholarships 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request noise; our own access log replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("stripe").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Scholar Stream Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Not fatal: public routes and /health still work
        logger.error("Configuration error: %s", str(e))

    store = create_store()
    app.state.store = store
    try:
        await store.connect(
            attempts=settings.db_connect_attempts,
            min_wait=settings.db_connect_min_wait,
            max_wait=settings.db_connect_max_wait,
        )
    except PyMongoError as e:
        logger.error("MongoDB unreachable after %d attempts: %s", settings.db_connect_attempts, str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Scholar Stream Backend shutting down...")
    await store.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy onto HTTP responses.

    Handler table:
        ValidationError         → 400 validation_error (with details)
        AuthenticationError     → 401 authentication_required
        InvalidTokenError       → 403 invalid_token
        ForbiddenError          → 403 forbidden
        NotFoundError           → 404 not_found
        DatabaseError           → 500 server_error (fixed per-operation message)
        PaymentProviderError    → 500 payment_error (provider message)
        ScholarStreamError      → 500 server_error
        RequestValidationError  → 422 {"detail": [...]} without the echoed input
        unmatched route/method  → 404 "Route not found"
        Exception (fallback)    → 500 internal_server_error

    Unexpected exceptions from routes are answered by UnhandledErrorMiddleware
    inside the middleware stack; the Exception handler only sees failures
    raised by the outer middleware themselves.

    `context` is logged, never returned, except for validation errors where
    it only names the offending field.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return error_response(401, "authentication_required", exc.message)

    @app.exception_handler(InvalidTokenError)
    async def handle_invalid_token(request: Request, exc: InvalidTokenError):
        return error_response(403, "invalid_token", exc.message)

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        logger.warning(
            "[%s] Forbidden %s %s | Context: %s",
            request_id_var.get(""),
            request.method,
            request.url.path,
            exc.context,
        )
        return error_response(403, "forbidden", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, "not_found", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, "server_error", exc.message)

    @app.exception_handler(PaymentProviderError)
    async def handle_payment_error(request: Request, exc: PaymentProviderError):
        logger.error("[%s] Payment error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, "payment_error", exc.message)

    @app.exception_handler(ScholarStreamError)
    async def handle_application_error(request: Request, exc: ScholarStreamError):
        logger.error("[%s] Application error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, "server_error", exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        # "input" may hold Infinity or NaN, which the JSON renderer refuses
        errors = [{k: v for k, v in err.items() if k != "input"} for err in exc.errors()]
        return JSONResponse(status_code=422, content={"detail": jsonable_encoder(errors)})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # an unmatched method on a known path is answered like an unmatched path
        if (exc.status_code == 404 and exc.detail == "Not Found") or exc.status_code == 405:
            return error_response(404, "not_found", "Route not found")
        return await http_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Stack trace goes to the log only."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return unexpected_error_response()


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Middleware executes in reverse order of addition, so RequestID (added
    last) sees the request first and UnhandledErrorMiddleware (added first)
    sits next to the routes.
    """
    app = FastAPI(
        title="Scholar Stream API",
        description=(
            "Scholarship platform backend: accounts, scholarship listings, "
            "applications, reviews and application-fee checkout."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(scholarships.router)
    app.include_router(applications.router)
    app.include_router(reviews.router)
    app.include_router(checkout.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("scholarstream.main:app", host=settings.backend_host, port=settings.port)
