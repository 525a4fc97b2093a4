"""
Reading progress tracker — one row per (user, book).

State machine::

    not_started ──start-or-resume──▶ in_progress ──complete──▶ completed

Checkpoints only move the position fields, never the status. Nothing here
moves a row backwards out of ``completed``.

Concurrent requests for the same pair are settled by the unique constraint on
(user_id, book_id): the loser of an insert race rolls back and re-reads the
winner's row. Later writes simply overwrite earlier ones.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from readingclub.models.book import (COMPLETED, IN_PROGRESS, NOT_STARTED,
                                     ReadingProgress)
from readingclub.services.catalog import CatalogService

logger = logging.getLogger(__name__)


class ProgressTracker:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.catalog = CatalogService(db)

    async def _get_row(self, user_id: int, book_id: int) -> ReadingProgress | None:
        result = await self.db.execute(
            select(ReadingProgress).where(
                ReadingProgress.user_id == user_id,
                ReadingProgress.book_id == book_id,
            )
        )
        return result.scalar_one_or_none()

    async def _get_or_create(self, user_id: int, book_id: int) -> tuple[ReadingProgress, bool]:
        """Return the row for (user, book), inserting an ``in_progress`` one if absent."""
        row = await self._get_row(user_id, book_id)
        if row is not None:
            return row, False

        now = datetime.now(timezone.utc)
        row = ReadingProgress(
            user_id=user_id,
            book_id=book_id,
            status=IN_PROGRESS,
            progress_percent=0.0,
            last_position=0.0,
            started_at=now,
            updated_at=now,
        )
        self.db.add(row)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            row = await self._get_row(user_id, book_id)
            if row is None:
                raise
            logger.info("Progress insert race handled for user %d book %d", user_id, book_id)
            return row, False
        await self.db.refresh(row)
        return row, True

    async def start_or_resume(self, user_id: int, book_id: int) -> tuple[str | None, ReadingProgress]:
        """Open a published book, creating the progress row on first open.

        Returns the book's content URL and its progress row. Completed books
        can be reopened; their status is left alone.
        """
        book = await self.catalog.get(book_id, published_only=True)
        content_url = book.content_url
        row, created = await self._get_or_create(user_id, book_id)

        if created:
            logger.info("User %d started book %d", user_id, book_id)
        elif row.status == NOT_STARTED:
            row.status = IN_PROGRESS
            row.started_at = row.started_at or datetime.now(timezone.utc)
            await self.db.commit()
            await self.db.refresh(row)
        return content_url, row

    async def checkpoint(
        self,
        user_id: int,
        book_id: int,
        percent: float,
        chapter: str | None,
        position: float,
    ) -> ReadingProgress:
        """Save the reader's position. Regressions are accepted as reported."""
        await self.catalog.get(book_id)
        row, _ = await self._get_or_create(user_id, book_id)

        row.progress_percent = percent
        row.last_chapter = chapter
        row.last_position = position
        row.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.db.refresh(row)
        return row

    async def complete(self, user_id: int, book_id: int) -> ReadingProgress:
        await self.catalog.get(book_id)
        row, _ = await self._get_or_create(user_id, book_id)

        now = datetime.now(timezone.utc)
        row.status = COMPLETED
        row.progress_percent = 100.0
        row.completed_at = row.completed_at or now
        row.updated_at = now
        await self.db.commit()
        await self.db.refresh(row)
        logger.info("User %d completed book %d", user_id, book_id)
        return row

    async def progress_by_book(self, user_id: int) -> dict[int, ReadingProgress]:
        result = await self.db.execute(
            select(ReadingProgress).where(ReadingProgress.user_id == user_id)
        )
        return {row.book_id: row for row in result.scalars().all()}
