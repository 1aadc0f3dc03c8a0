"""
FastAPI application factory.

Assembles the app, builds the SessionManager from settings, registers
routers and exception handlers, and wires up lifecycle events.
Database schema is managed by Alembic, NOT create_all.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.controllers.auth_controller import router as auth_router
from app.core.config import settings
from app.core.database import engine
from app.core.error_handlers import register_exception_handlers
from app.models import Base  # noqa: F401, ensures all models are registered
from app.services.session_service import SessionConfig, SessionManager

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Startup / Shutdown ───────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Session engine ready: %r", app.state.session_manager)
    yield
    await engine.dispose()
    logger.info("Database engine disposed.")


def create_app(session_config: SessionConfig | None = None) -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # One manager per process; the secret never changes after this point.
    app.state.session_manager = SessionManager(session_config or SessionConfig.from_settings(settings))

    register_exception_handlers(app)

    # ── Register routers ─────────────────────────────────────────────
    app.include_router(auth_router)

    # ── Health check ─────────────────────────────────────────────────
    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
