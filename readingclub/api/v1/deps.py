"""
FastAPI dependencies — auth guards, database session, and per-request services.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from readingclub.core.config import settings
from readingclub.core.exceptions import Forbidden, Unauthorized
from readingclub.core.security import decode_access_token
from readingclub.db.session import async_session_factory
from readingclub.models.user import User
from readingclub.services.aggregation import AdminService
from readingclub.services.auth import AuthService
from readingclub.services.billing import BillingService
from readingclub.services.catalog import CatalogService
from readingclub.services.messaging import MessagingService
from readingclub.services.progress import ProgressTracker

# auto_error=False so a missing header raises our own Unauthorized
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/login", auto_error=False
)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        yield session


# ── Services ────────────────────────────────────────────────────────
def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_catalog_service(db: AsyncSession = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def get_progress_tracker(db: AsyncSession = Depends(get_db)) -> ProgressTracker:
    return ProgressTracker(db)


def get_billing_service(db: AsyncSession = Depends(get_db)) -> BillingService:
    return BillingService(db)


def get_messaging_service(db: AsyncSession = Depends(get_db)) -> MessagingService:
    return MessagingService(db)


def get_admin_service(db: AsyncSession = Depends(get_db)) -> AdminService:
    return AdminService(db)


# ── Auth dependencies ───────────────────────────────────────────────
async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Decode the bearer JWT and look up the user it names."""
    if not token:
        raise Unauthorized()

    payload = decode_access_token(token)
    if payload is None:
        raise Unauthorized()

    user_id: str | None = payload.get("sub")
    if user_id is None or not str(user_id).isdigit():
        raise Unauthorized()

    result = await db.execute(select(User).where(User.id == int(user_id)))
    user = result.scalar_one_or_none()
    if user is None:
        raise Unauthorized()
    return user


async def require_admin(
    current_user: User = Depends(get_current_user),
) -> User:
    """Only allow admin role to proceed."""
    if current_user.role != "admin":
        raise Forbidden()
    return current_user
