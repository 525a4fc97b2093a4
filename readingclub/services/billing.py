"""
Registration & payment-processor bridge.

Registration is the second half of a two-phase flow: the client has already
validated the form and had the processor tokenize a card or SEPA mandate. The
backend only stores the opaque payment-method reference; no charge is made
before the billing cutover date.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from readingclub.core.exceptions import EmailTaken, ValidationError
from readingclub.core.pricing import tier_for
from readingclub.core.security import hash_pin
from readingclub.models.finance import PaymentEvent
from readingclub.models.user import User
from readingclub.schemas.user import RegisterRequest

logger = logging.getLogger(__name__)

# Processor event type -> subscription status it moves the subscriber to.
EVENT_STATUS = {
    "invoice.paid": "active",
    "invoice.payment_failed": "payment_issue",
    "customer.subscription.deleted": "cancelled",
}


class BillingService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def register(self, body: RegisterRequest) -> User:
        tier = tier_for(body.country)
        if tier is None:
            raise ValidationError(f"Unsupported country: {body.country}")

        existing = await self.db.execute(select(User).where(User.email == body.email))
        if existing.scalar_one_or_none() is not None:
            raise EmailTaken()

        user = User(
            email=body.email,
            hashed_pin=hash_pin(body.pin),
            role="user",
            first_name=body.first_name,
            last_name=body.last_name,
            birth_date=body.birth_date,
            sex=body.sex,
            country=tier.country,
            currency=tier.currency,
            subscription_status="active",
            payment_method_id=body.payment_method_id,
            payment_method_type=body.payment_method_type,
            notifications_accepted=body.notifications_accepted,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email.
            await self.db.rollback()
            raise EmailTaken() from None
        await self.db.refresh(user)
        logger.info(
            "Registered user %d (%s, %s, %s)",
            user.id,
            tier.country,
            tier.currency,
            body.payment_method_type,
        )
        return user

    async def handle_event(self, raw_body: bytes) -> dict[str, Any]:
        """Record a processor webhook event and apply its status change, if any.

        The body arrives unparsed; signature checks happen before this call.
        Redelivered events (same id) are acknowledged without side effects.
        """
        try:
            event = json.loads(raw_body)
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise ValidationError("Malformed webhook payload") from None
        if not isinstance(event, dict) or not event.get("id") or not event.get("type"):
            raise ValidationError("Webhook event requires id and type")
        data = event.get("data") or {}
        if not isinstance(data, dict):
            raise ValidationError("Webhook event data must be an object")

        event_id = str(event["id"])
        event_type = str(event["type"])
        seen = await self.db.execute(
            select(PaymentEvent).where(PaymentEvent.event_id == event_id)
        )
        if seen.scalar_one_or_none() is not None:
            return {"received": True, "duplicate": True}

        self.db.add(PaymentEvent(event_id=event_id, event_type=event_type))

        updated = None
        new_status = EVENT_STATUS.get(event_type)
        obj = data.get("object") or {}
        email = obj.get("customer_email") if isinstance(obj, dict) else None
        if new_status and email:
            result = await self.db.execute(
                select(User).where(User.email == str(email).strip().lower())
            )
            user = result.scalar_one_or_none()
            if user is not None:
                user.subscription_status = new_status
                updated = user.id

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            return {"received": True, "duplicate": True}

        logger.info("Payment event %s (%s) processed", event_id, event_type)
        if updated is not None:
            logger.info("Subscription of user %d set to %s", updated, new_status)
        return {"received": True, "duplicate": False}
