"""
Reading Club — Application entry point.

This is the **only** file that assembles the app.  All business logic
lives in the `services/` package; `api/` only maps HTTP onto it.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from readingclub.api.v1.api import api_router
from readingclub.api.v1.endpoints.auth import limiter
from readingclub.core.config import settings
from readingclub.core.exceptions import register_exception_handlers
from readingclub.db.base import Base
from readingclub.db.session import async_session_factory, engine

# Ensure all models are imported so metadata.create_all can see them
from readingclub.models.book import Book, ReadingProgress  # noqa: F401
from readingclub.models.finance import Expense, PaymentEvent  # noqa: F401
from readingclub.models.messaging import ContactMessage, Notification  # noqa: F401
from readingclub.models.user import User  # noqa: F401
from readingclub.services.auth import AuthService

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    # Seed default admin user on first run
    async with async_session_factory() as session:
        if await AuthService(session).ensure_admin(
            settings.FIRST_ADMIN_EMAIL, settings.FIRST_ADMIN_PIN
        ):
            logger.info(
                "Default admin created: %s (PIN: <redacted>)",
                settings.FIRST_ADMIN_EMAIL,
            )

    logger.info("📚 Reading Club v%s started", settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Subscription reading club API",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Login rate limiting
    application.state.limiter = limiter

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    # Mount API v1
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    @application.get("/health", include_in_schema=False)
    async def health() -> dict:
        """Public health check — DB connectivity."""
        db_ok = True
        try:
            async with async_session_factory() as session:
                await session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error("Health check DB failure: %s", e)
            db_ok = False
        return {"status": "ok" if db_ok else "degraded", "db": db_ok}

    return application


app = create_app()
