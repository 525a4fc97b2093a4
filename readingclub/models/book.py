"""
Book & ReadingProgress models — catalog and per-reader resume state.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (Boolean, Column, DateTime, Float, ForeignKey, Index,
                        Integer, String, Text, UniqueConstraint)
from sqlalchemy.orm import relationship

from readingclub.db.base import Base

GENRES = ("polar", "romance", "sf", "feelgood")

NOT_STARTED = "not_started"
IN_PROGRESS = "in_progress"
COMPLETED = "completed"


class Book(Base):
    __tablename__ = "books"
    __table_args__ = (Index("ix_books_published", "is_published", "published_at"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    title: str = Column(String(300), nullable=False)  # type: ignore[assignment]
    author: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    genre: str | None = Column(String(20), nullable=True)  # type: ignore[assignment]
    editorial_summary: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    content_url: str | None = Column(String(1000), nullable=True)  # type: ignore[assignment]
    published_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    is_published: bool = Column(Boolean, default=False, server_default="false")  # type: ignore[assignment]
    weekly_rank: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


class ReadingProgress(Base):
    __tablename__ = "reading_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="uq_progress_user_book"),
        Index("ix_progress_user_status", "user_id", "status"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    # Weak reference: removing a book leaves its progress rows in place.
    book_id: int = Column(Integer, nullable=False, index=True)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False, default=NOT_STARTED)  # type: ignore[assignment]
    # not_started | in_progress | completed
    progress_percent: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    last_chapter: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    last_position: float = Column(Float, nullable=False, default=0.0)  # type: ignore[assignment]
    started_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    completed_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    user = relationship("User", back_populates="reading_progress")
