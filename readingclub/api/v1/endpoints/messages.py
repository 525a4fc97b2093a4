"""
Contact form intake and admin messaging console.

- POST /contact is public.
- Everything under /admin requires the admin role.
"""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends

from readingclub.api.v1.deps import get_messaging_service, require_admin
from readingclub.models.messaging import ContactMessage, Notification
from readingclub.models.user import User
from readingclub.schemas.messaging import (ContactCreate, ContactRead,
                                           NotificationCreate,
                                           NotificationOverview,
                                           NotificationRead)
from readingclub.services.messaging import MessagingService

router = APIRouter(tags=["messages"])
logger = logging.getLogger(__name__)


@router.post("/contact", status_code=201)
async def submit_contact(
    body: ContactCreate,
    messaging: MessagingService = Depends(get_messaging_service),
) -> dict:
    msg = await messaging.submit_contact(body.name, body.email, body.subject, body.message)
    return {"success": True, "id": msg.id}


@router.get("/admin/messages", response_model=list[ContactRead])
async def list_messages(
    status: Literal["unread", "read"] | None = None,
    messaging: MessagingService = Depends(get_messaging_service),
    _admin: User = Depends(require_admin),
) -> list[ContactMessage]:
    return await messaging.list_messages(status)


@router.patch("/admin/messages/{message_id}/read", response_model=ContactRead)
async def mark_message_read(
    message_id: int,
    messaging: MessagingService = Depends(get_messaging_service),
    _admin: User = Depends(require_admin),
) -> ContactMessage:
    return await messaging.mark_read(message_id)


@router.get("/admin/notifications", response_model=NotificationOverview)
async def notifications_overview(
    messaging: MessagingService = Depends(get_messaging_service),
    _admin: User = Depends(require_admin),
) -> NotificationOverview:
    history = await messaging.history()
    return NotificationOverview(
        subscriber_count=await messaging.subscriber_count(),
        total_sent=len(history),
        history=[NotificationRead.model_validate(n) for n in history],
    )


@router.post("/admin/notifications", response_model=NotificationRead, status_code=201)
async def send_notification(
    body: NotificationCreate,
    messaging: MessagingService = Depends(get_messaging_service),
    _admin: User = Depends(require_admin),
) -> Notification:
    return await messaging.send_notification(body.title, body.message)
