"""
NoteKeeper Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routes.
       Collaborators (notes platform, object store, authenticator, controller)
       are either passed in (tests) or built by the lifespan handler from
       settings.
Who:   uvicorn (`uvicorn notekeeper.main:app`) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │  Middleware:  Request ID → Access Log → CORS             │
    │  Routes:      /api/notes  /api/files  /api/auth  /health │
    │  app.state:   controller ─┬─ notes_api  (GraphQL | DB)   │
    │                           └─ object_store (local disk)   │
    │               authenticator                              │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config check → platform client → object store →
              controller → initial fetch_all (failure logged, not fatal)
    Shutdown: close platform client → dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from notekeeper import __version__
from notekeeper.config import settings
from notekeeper.database import (
    build_engine,
    build_session_factory,
    create_schema,
    dispose_engine,
)
from notekeeper.exceptions import (
    AttachmentNotFoundError,
    AuthenticationError,
    DatabaseError,
    NoteKeeperError,
    NotFoundError,
    ObjectStoreError,
    RemoteApiError,
    ValidationError,
)
from notekeeper.middleware.logging import RequestLoggingMiddleware
from notekeeper.middleware.request_id import RequestIDMiddleware, request_id_var
from notekeeper.routes import auth, files, health, notes
from notekeeper.services.auth_service import Authenticator, TokenAuthenticator
from notekeeper.services.database_api import DatabaseNotesApi
from notekeeper.services.graphql_api import GraphQLNotesApi
from notekeeper.services.local_store import LocalObjectStore
from notekeeper.services.note_controller import NoteListController
from notekeeper.services.notes_api import NotesApi
from notekeeper.services.object_store import ObjectStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Collaborators
# ══════════════════════════════════════════════════════════════════════════

async def build_notes_api(app: FastAPI) -> NotesApi:
    """Build the NotesApi selected by NOTES_BACKEND."""
    if settings.notes_backend == "graphql":
        return GraphQLNotesApi(
            endpoint=settings.graphql_endpoint,
            api_key=settings.graphql_api_key,
            timeout=settings.remote_timeout,
        )

    engine = build_engine()
    app.state.engine = engine
    if engine.url.get_backend_name() == "sqlite":
        await create_schema(engine)
    return DatabaseNotesApi(build_session_factory(engine))


def build_object_store() -> ObjectStore:
    return LocalObjectStore(
        storage_root=settings.storage_root,
        public_base_url=settings.public_base_url,
        signing_secret=settings.url_signing_secret,
        url_expiry_seconds=settings.url_expiry_seconds,
    )


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("NoteKeeper Backend %s starting up (backend=%s)", __version__, settings.notes_backend)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    owns_controller = getattr(app.state, "controller", None) is None
    if owns_controller:
        if getattr(app.state, "object_store", None) is None:
            app.state.object_store = build_object_store()
        notes_api = await build_notes_api(app)
        app.state.controller = NoteListController(notes_api, app.state.object_store)

        try:
            await app.state.controller.fetch_all()
        except NoteKeeperError as e:
            # The list stays not_loaded; the first GET /api/notes retries
            logger.error("Initial note load failed: %s", e.message)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("NoteKeeper Backend shutting down...")
    if owns_controller:
        await app.state.controller.notes_api.close()
        await dispose_engine(getattr(app.state, "engine", None))
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, error: str, message: str, details=None, headers=None) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy to HTTP responses.

        ValidationError          → 400
        AuthenticationError      → 401
        NotFoundError            → 404
        AttachmentNotFoundError  → 404
        RemoteApiError           → 502
        ObjectStoreError         → 502
        DatabaseError            → 500 (generic message)
        NoteKeeperError          → 500
        Exception                → 500 (stack trace logged only)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return _error_response(
            401, "unauthorized", exc.message, headers={"WWW-Authenticate": "Bearer"}
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(AttachmentNotFoundError)
    async def handle_attachment_not_found(request: Request, exc: AttachmentNotFoundError):
        return _error_response(404, "not_found", "The requested attachment was not found")

    @app.exception_handler(RemoteApiError)
    async def handle_remote_api_error(request: Request, exc: RemoteApiError):
        logger.error("[%s] Notes platform error: %s | %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(
            502, "platform_error", exc.message, {"operation": exc.operation} if exc.operation else None
        )

    @app.exception_handler(ObjectStoreError)
    async def handle_object_store_error(request: Request, exc: ObjectStoreError):
        logger.error("[%s] Object store error: %s | %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(502, "storage_error", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(NoteKeeperError)
    async def handle_app_error(request: Request, exc: NoteKeeperError):
        logger.error("[%s] Application error: %s | %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    controller: Optional[NoteListController] = None,
    object_store: Optional[ObjectStore] = None,
    authenticator: Optional[Authenticator] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Collaborators passed here are used as-is and never closed by the
    lifespan handler; missing ones are built from settings at startup.
    """
    app = FastAPI(
        title="NoteKeeper API",
        description=(
            "Notes with optional image attachments. Records live on a notes "
            "platform, images in an object store."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    app.state.controller = controller
    app.state.object_store = object_store or (controller.object_store if controller else None)
    app.state.authenticator = authenticator or TokenAuthenticator(settings.auth_tokens_list)

    # Last added = first to execute: RequestID → Logging → CORS
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

    register_exception_handlers(app)

    app.include_router(notes.router)
    app.include_router(files.router)
    app.include_router(auth.router)
    app.include_router(health.router)

    return app


app = create_app()
