"""
Book catalog — user-facing published listing and admin CRUD.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from readingclub.core.exceptions import NotFound, ValidationError
from readingclub.models.book import Book

logger = logging.getLogger(__name__)

# Fields that must all be filled before a book can go live.
PUBLISH_REQUIRED_FIELDS = (
    "title",
    "author",
    "genre",
    "editorial_summary",
    "content_url",
    "published_at",
)


def missing_publish_fields(book: Book) -> list[str]:
    missing = []
    for field in PUBLISH_REQUIRED_FIELDS:
        value = getattr(book, field)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)
    return missing


class CatalogService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_published(self) -> list[Book]:
        """Published books only, most recently published first."""
        result = await self.db.execute(
            select(Book)
            .where(Book.is_published.is_(True))
            .order_by(Book.published_at.desc().nulls_last(), Book.id.desc())
        )
        return list(result.scalars().all())

    async def list_all(self) -> list[Book]:
        result = await self.db.execute(
            select(Book).order_by(Book.created_at.desc(), Book.id.desc())
        )
        return list(result.scalars().all())

    async def get(self, book_id: int, published_only: bool = False) -> Book:
        query = select(Book).where(Book.id == book_id)
        if published_only:
            query = query.where(Book.is_published.is_(True))
        result = await self.db.execute(query)
        book = result.scalar_one_or_none()
        if book is None:
            raise NotFound("Book not found")
        return book

    async def create_book(self, data: dict[str, Any]) -> Book:
        book = Book(**data)
        _check_publishable(book)
        self.db.add(book)
        await self.db.commit()
        await self.db.refresh(book)
        logger.info("Created book %d (%s)", book.id, book.title)
        return book

    async def update_book(self, book_id: int, changes: dict[str, Any]) -> Book:
        book = await self.get(book_id)
        for field, value in changes.items():
            setattr(book, field, value)
        _check_publishable(book)
        await self.db.commit()
        await self.db.refresh(book)
        logger.info("Updated book %d", book_id)
        return book

    async def toggle_publish(self, book_id: int) -> Book:
        book = await self.get(book_id)
        book.is_published = not book.is_published
        _check_publishable(book)
        await self.db.commit()
        await self.db.refresh(book)
        logger.info(
            "Book %d %s", book_id, "published" if book.is_published else "unpublished"
        )
        return book


def _check_publishable(book: Book) -> None:
    if not book.is_published:
        return
    missing = missing_publish_fields(book)
    if missing:
        raise ValidationError(
            "Cannot publish, missing fields: " + ", ".join(missing)
        )
