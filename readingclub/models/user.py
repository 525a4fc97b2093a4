"""
User model — club members and administrators.

Holds the hashed PIN credential, role, profile, and subscription state.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from readingclub.db.base import Base


class User(Base):
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    email: str = Column(String(320), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    hashed_pin: str = Column(String(128), nullable=False)  # type: ignore[assignment]
    role: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default="user",
        server_default="user",
    )  # user | admin

    first_name: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    last_name: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    country: str | None = Column(String(60), nullable=True)  # type: ignore[assignment]
    birth_date: str | None = Column(String(10), nullable=True)  # type: ignore[assignment]  # YYYY-MM-DD
    sex: str | None = Column(String(10), nullable=True)  # type: ignore[assignment]
    currency: str = Column(String(3), nullable=False, default="EUR", server_default="EUR")  # type: ignore[assignment]

    subscription_status: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default="pending",
        server_default="pending",
    )  # active | pending | cancelled | payment_issue
    payment_method_id: str | None = Column(String(255), nullable=True)  # type: ignore[assignment]
    payment_method_type: str | None = Column(String(20), nullable=True)  # type: ignore[assignment]  # card | sepa_debit
    notifications_accepted: bool = Column(Boolean, default=False, server_default="false")  # type: ignore[assignment]
    welcome_seen: bool = Column(Boolean, default=False, server_default="false")  # type: ignore[assignment]

    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    last_login_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    last_pin_change_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]

    reading_progress = relationship(
        "ReadingProgress",
        back_populates="user",
        cascade="all, delete-orphan",
    )
