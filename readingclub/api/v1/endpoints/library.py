"""
Reader-facing library — published catalog and reading progress.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from readingclub.api.v1.deps import (get_catalog_service, get_current_user,
                                     get_progress_tracker)
from readingclub.models.book import NOT_STARTED, ReadingProgress
from readingclub.models.user import User
from readingclub.schemas.book import (BookRead, CheckpointRequest, LibraryBook,
                                      ProgressRead, ReadingSession)
from readingclub.services.catalog import CatalogService
from readingclub.services.progress import ProgressTracker

router = APIRouter(prefix="/library", tags=["library"])


@router.get("", response_model=list[LibraryBook])
async def list_library(
    current_user: User = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
    tracker: ProgressTracker = Depends(get_progress_tracker),
) -> list[LibraryBook]:
    """Published books, newest first, each with the caller's progress."""
    books = await catalog.list_published()
    progress = await tracker.progress_by_book(current_user.id)
    items = []
    for book in books:
        row = progress.get(book.id)
        items.append(
            LibraryBook(
                **BookRead.model_validate(book).model_dump(),
                status=row.status if row else NOT_STARTED,
                progress_percent=row.progress_percent if row else 0.0,
            )
        )
    return items


@router.post("/{book_id}/start-or-resume", response_model=ReadingSession)
async def start_or_resume(
    book_id: int,
    current_user: User = Depends(get_current_user),
    tracker: ProgressTracker = Depends(get_progress_tracker),
) -> ReadingSession:
    content_url, row = await tracker.start_or_resume(current_user.id, book_id)
    return ReadingSession(content_url=content_url, progress=ProgressRead.model_validate(row))


@router.post("/{book_id}/progress", response_model=ProgressRead)
async def save_progress(
    book_id: int,
    body: CheckpointRequest,
    current_user: User = Depends(get_current_user),
    tracker: ProgressTracker = Depends(get_progress_tracker),
) -> ReadingProgress:
    """Periodic checkpoint from the reader."""
    return await tracker.checkpoint(
        current_user.id,
        book_id,
        body.progress_percent,
        body.last_chapter,
        body.last_position,
    )


@router.post("/{book_id}/complete", response_model=ProgressRead)
async def complete_book(
    book_id: int,
    current_user: User = Depends(get_current_user),
    tracker: ProgressTracker = Depends(get_progress_tracker),
) -> ReadingProgress:
    return await tracker.complete(current_user.id, book_id)
