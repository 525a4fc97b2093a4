"""
Auth endpoints — PIN login and the caller's own account.
"""

import logging

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from readingclub.api.v1.deps import get_auth_service, get_current_user
from readingclub.core.config import settings
from readingclub.models.user import User
from readingclub.schemas.user import (ChangePinRequest, LoginRequest,
                                      LoginResponse, NotificationPreference,
                                      UserRead)
from readingclub.services.auth import AuthService

# Login rate limiter, keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Authenticate with email + PIN. Returns a bearer token and the profile."""
    token, user = await auth.login(body.email, body.pin)
    return LoginResponse(token=token, user=UserRead.model_validate(user))


@router.get("/me", response_model=UserRead)
async def read_current_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Return profile of the currently authenticated user."""
    return current_user


@router.put("/me/change-pin")
async def change_pin(
    body: ChangePinRequest,
    current_user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
) -> dict:
    await auth.change_pin(current_user, body.current_pin, body.new_pin)
    return {"success": True, "message": "PIN updated"}


@router.put("/me/notifications", response_model=UserRead)
async def set_notification_preference(
    body: NotificationPreference,
    current_user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """Opt in or out of push notifications."""
    return await auth.set_notifications(current_user, body.accepted)


@router.post("/me/welcome-seen", response_model=UserRead)
async def mark_welcome_seen(
    current_user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """Record that the member dismissed the first-login welcome screen."""
    return await auth.mark_welcome_seen(current_user)
