"""
FastAPI application for the spaced learning backend.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from spaced.api.questions import build_questions_router
from spaced.api.users import build_users_router
from spaced.auth import IdentityStore, SessionIssuer
from spaced.config import Settings, configure_logging, get_settings
from spaced.integrations.sentry import capture_exception, init_sentry
from spaced.services import QuestionStore
from spaced.storage import StorageError, create_sqlite_database


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application.

    Stores are created here and bound to the routers; the database
    connection itself is opened in the lifespan.
    """
    settings = settings or get_settings()
    log = configure_logging(settings.log_level)

    db = create_sqlite_database(settings.database_path, logger=log.getChild("database"))
    identities = IdentityStore(db, logger=log.getChild("identity"))
    sessions = SessionIssuer(
        db,
        identities,
        session_ttl_minutes=settings.session_ttl_minutes,
        logger=log.getChild("sessions"),
    )
    questions = QuestionStore(db, logger=log.getChild("questions"))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the database and seed the bootstrap administrator."""
        if init_sentry(settings):
            log.info("Sentry error tracking enabled")

        await db.connect()
        if settings.has_bootstrap_admin:
            await identities.ensure_admin(settings.admin_username, settings.admin_password)

        log.info(f"Spaced Learning API starting in {settings.environment} mode")
        yield
        await db.close()
        log.info("Spaced Learning API shutting down")

    app = FastAPI(
        title="Spaced Learning API",
        description="Question/answer drills with per-user statistics",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.db = db
    app.state.identities = identities
    app.state.sessions = sessions
    app.state.questions = questions

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        client = request.client.host if request.client else "-"
        log.info(f"{client} {request.method} {request.url.path}")
        return await call_next(request)

    @app.exception_handler(RequestValidationError)
    async def malformed_input(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": "Malformed request"})

    @app.exception_handler(StorageError)
    async def storage_failure(request: Request, exc: StorageError):
        capture_exception(exc, path=request.url.path)
        return JSONResponse(status_code=400, content={"detail": "Bad request"})

    @app.get("/", response_class=PlainTextResponse)
    async def hello():
        return "Hello Pancake!"

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "spaced-api", "database": db.loaded}

    app.include_router(build_users_router(identities, sessions))
    app.include_router(build_questions_router(questions))

    return app
