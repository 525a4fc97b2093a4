"""
Expense & PaymentEvent models — admin bookkeeping and processor webhook receipts.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Integer, String

from readingclub.db.base import Base


class Expense(Base):
    __tablename__ = "expenses"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    amount: float = Column(Float, nullable=False)  # type: ignore[assignment]
    currency: str = Column(String(3), nullable=False, default="EUR")  # type: ignore[assignment]
    date: str = Column(String(10), nullable=False, index=True)  # type: ignore[assignment]  # YYYY-MM-DD
    category: str = Column(String(50), nullable=False)  # type: ignore[assignment]
    country: str = Column(String(2), nullable=False)  # type: ignore[assignment]  # VAT bucket
    vat_amount: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    description: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )


class PaymentEvent(Base):
    __tablename__ = "payment_events"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    event_id: str = Column(String(255), unique=True, nullable=False)  # type: ignore[assignment]
    event_type: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    received_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
