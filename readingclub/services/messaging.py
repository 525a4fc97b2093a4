"""
Contact intake and admin push notifications.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from readingclub.core.exceptions import NotFound
from readingclub.models.messaging import ContactMessage, Notification
from readingclub.models.user import User

logger = logging.getLogger(__name__)


class MessagingService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ── Contact ─────────────────────────────────────────────────────
    async def submit_contact(self, name: str, email: str, subject: str, message: str) -> ContactMessage:
        msg = ContactMessage(name=name, email=email, subject=subject, message=message)
        self.db.add(msg)
        await self.db.commit()
        await self.db.refresh(msg)
        logger.info("Contact message %d received", msg.id)
        return msg

    async def list_messages(self, status: str | None = None) -> list[ContactMessage]:
        query = select(ContactMessage).order_by(
            ContactMessage.created_at.desc(), ContactMessage.id.desc()
        )
        if status == "unread":
            query = query.where(ContactMessage.is_read.is_(False))
        elif status == "read":
            query = query.where(ContactMessage.is_read.is_(True))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def mark_read(self, message_id: int) -> ContactMessage:
        result = await self.db.execute(
            select(ContactMessage).where(ContactMessage.id == message_id)
        )
        msg = result.scalar_one_or_none()
        if msg is None:
            raise NotFound("Message not found")
        if not msg.is_read:
            msg.is_read = True
            await self.db.commit()
            await self.db.refresh(msg)
        return msg

    # ── Notifications ───────────────────────────────────────────────
    async def subscriber_count(self) -> int:
        result = await self.db.execute(
            select(func.count(User.id)).where(User.notifications_accepted.is_(True))
        )
        return int(result.scalar_one())

    async def send_notification(self, title: str, message: str) -> Notification:
        """Log a broadcast to every opted-in user.

        Delivery itself is best effort and happens outside this service; the
        log keeps only the recipient count at send time.
        """
        count = await self.subscriber_count()
        notification = Notification(title=title, message=message, sent_count=count, status="sent")
        self.db.add(notification)
        await self.db.commit()
        await self.db.refresh(notification)
        logger.info("Notification %d sent to %d subscribers", notification.id, count)
        return notification

    async def history(self) -> list[Notification]:
        result = await self.db.execute(
            select(Notification).order_by(Notification.sent_at.desc(), Notification.id.desc())
        )
        return list(result.scalars().all())
