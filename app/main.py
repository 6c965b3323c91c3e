"""
Donation bridge — FastAPI application entry-point.
"""
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import Settings, settings as default_settings
from app.database import create_tables, make_session_factory
from app.errors import BridgeError, InternalError, ValidationError
from app.stores import BoundedDonationStore, LeaderboardCache, SqlDonationStore, SqlLeaderboardCache

logging.basicConfig(
    level=default_settings.LOG_LEVEL,
    format="%(asctime)s  %(name)-30s  %(levelname)-5s  %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def build_stores(settings: Settings):
    """Return ``(donation_store, leaderboard, session_factory)`` for the configured backend."""
    backend = settings.STORE_BACKEND.lower()
    if backend == "memory":
        return BoundedDonationStore(settings.MAX_STORED_DONATIONS), LeaderboardCache(), None
    if backend == "sql":
        session_factory = make_session_factory(settings.DATABASE_URL, echo=settings.DEBUG)
        return SqlDonationStore(session_factory), SqlLeaderboardCache(session_factory), session_factory
    raise ValueError(f"Unknown STORE_BACKEND: {settings.STORE_BACKEND!r}")


def _error_body(message: str) -> dict:
    return {"success": False, "error": message}


def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(BridgeError)
    async def bridge_error_handler(request: Request, exc: BridgeError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        else:
            logger.info("%s %s rejected (%d): %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.public_message))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        err = ValidationError("Invalid request parameters", details={"errors": exc.errors()})
        logger.info("%s %s rejected (400): %s", request.method, request.url.path, err)
        return JSONResponse(status_code=err.status_code, content=_error_body(err.public_message))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        err = InternalError()
        return JSONResponse(status_code=err.status_code, content=_error_body(err.public_message))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    donation_store, leaderboard, session_factory = build_stores(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: ensure data dir + tables exist
        if session_factory is not None:
            if settings.DATABASE_URL.startswith("sqlite:///./"):
                os.makedirs(settings.DATA_DIR, exist_ok=True)
            create_tables(session_factory)
            logger.info("Database tables ready (%s)", settings.DATABASE_URL)
        logger.info("Donation store: %s", type(donation_store).__name__)
        yield
        logger.info("Shutting down")

    app = FastAPI(
        title="Donation Bridge",
        description="Donation webhook → handle extraction → pending queue for the game server",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.donation_store = donation_store
    app.state.leaderboard = leaderboard

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.get("/")
    async def root():
        return {"service": "Donation Bridge", "version": VERSION, "status": "running"}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    # ── Register API routers ─────────────────────────────────────────────
    from app.routers.webhook import router as webhook_router
    from app.routers.donations import router as donations_router
    from app.routers.leaderboard import router as leaderboard_router

    app.include_router(webhook_router, prefix="/api", tags=["Webhook"])
    app.include_router(donations_router, prefix="/api", tags=["Donations"])
    app.include_router(leaderboard_router, prefix="/api", tags=["Leaderboard"])

    return app


app = create_app()
