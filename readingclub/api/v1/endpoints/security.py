"""
Admin security console — own PIN, client PIN resets.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from readingclub.api.v1.deps import get_auth_service, require_admin
from readingclub.models.user import User
from readingclub.schemas.user import (ChangePinRequest, ResetClientPinRequest,
                                      ResetClientPinResponse, SecurityInfo)
from readingclub.services.auth import AuthService

router = APIRouter(prefix="/admin/security", tags=["admin"])
logger = logging.getLogger(__name__)


@router.get("/info", response_model=SecurityInfo)
async def security_info(
    admin: User = Depends(require_admin),
) -> SecurityInfo:
    return SecurityInfo(
        last_pin_change=admin.last_pin_change_at,
        last_login=admin.last_login_at,
    )


@router.post("/change-admin-pin")
async def change_admin_pin(
    body: ChangePinRequest,
    admin: User = Depends(require_admin),
    auth: AuthService = Depends(get_auth_service),
) -> dict:
    await auth.change_pin(admin, body.current_pin, body.new_pin)
    return {"success": True, "message": "Admin PIN updated"}


@router.post("/reset-client-pin", response_model=ResetClientPinResponse)
async def reset_client_pin(
    body: ResetClientPinRequest,
    admin: User = Depends(require_admin),
    auth: AuthService = Depends(get_auth_service),
) -> ResetClientPinResponse:
    """Generate a new PIN for a client. The plaintext is shown once, here."""
    pin = await auth.reset_client_pin(body.client_email)
    logger.info("Admin %d reset a client PIN", admin.id)
    return ResetClientPinResponse(
        generated_pin=pin,
        info=f"New PIN generated for {body.client_email}. It will not be shown again.",
    )
