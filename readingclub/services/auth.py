"""
Authentication & PIN management.

``AuthService`` is built per request around the request's ``AsyncSession``.
Every failure raises a domain error from ``core.exceptions``; the HTTP layer
never decides status codes itself.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from readingclub.core.config import settings
from readingclub.core.exceptions import (InvalidCredentials, InvalidNewPin,
                                         NotFound, WrongCurrentPin)
from readingclub.core.security import (create_access_token, generate_pin,
                                       hash_pin, is_valid_pin, verify_pin)
from readingclub.models.user import User

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def login(self, email: str, pin: str) -> tuple[str, User]:
        """Verify email + PIN and issue a signed access token.

        Unknown email and wrong PIN raise the same ``InvalidCredentials`` so
        the response never reveals which one was wrong.
        """
        user = await self.get_by_email(email)
        if user is None or not verify_pin(pin, user.hashed_pin):
            logger.info("Failed login attempt")
            raise InvalidCredentials()

        user.last_login_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.db.refresh(user)

        token = create_access_token(user.id, email=user.email, role=user.role)
        logger.info("User %d logged in", user.id)
        return token, user

    async def change_pin(self, user: User, current_pin: str, new_pin: str) -> User:
        if not verify_pin(current_pin, user.hashed_pin):
            raise WrongCurrentPin()
        if not is_valid_pin(new_pin, user.role):
            raise InvalidNewPin(_pin_rule_message(user.role))

        # Hash and timestamp are written in one commit.
        user.hashed_pin = hash_pin(new_pin)
        user.last_pin_change_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info("PIN changed for user %d", user.id)
        return user

    async def reset_client_pin(self, client_email: str) -> str:
        """Replace a client's PIN with a fresh random one.

        The plaintext is returned exactly once to the caller and never stored.
        """
        user = await self.get_by_email(client_email)
        if user is None or user.role != "user":
            raise NotFound("Client not found")

        plain = generate_pin()
        while verify_pin(plain, user.hashed_pin):
            plain = generate_pin()
        user.hashed_pin = hash_pin(plain)
        user.last_pin_change_at = datetime.now(timezone.utc)
        await self.db.commit()
        logger.info("PIN reset by admin for user %d", user.id)
        return plain

    async def set_notifications(self, user: User, accepted: bool) -> User:
        user.notifications_accepted = accepted
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def mark_welcome_seen(self, user: User) -> User:
        if not user.welcome_seen:
            user.welcome_seen = True
            await self.db.commit()
            await self.db.refresh(user)
        return user

    async def ensure_admin(self, email: str, pin: str) -> bool:
        """Create the first admin account if absent. Returns True when created."""
        if await self.get_by_email(email) is not None:
            return False
        admin = User(
            email=email.strip().lower(),
            hashed_pin=hash_pin(pin),
            role="admin",
            first_name="Admin",
            last_name="Reading Club",
            subscription_status="active",
            welcome_seen=True,
        )
        self.db.add(admin)
        await self.db.commit()
        return True


def _pin_rule_message(role: str) -> str:
    if role == "admin":
        return (
            f"New PIN must be {settings.ADMIN_PIN_MIN_LENGTH} to "
            f"{settings.ADMIN_PIN_MAX_LENGTH} digits"
        )
    return f"New PIN must be exactly {settings.USER_PIN_LENGTH} digits"
