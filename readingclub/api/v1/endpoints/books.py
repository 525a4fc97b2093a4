"""
Catalog administration.

All endpoints require the admin role. Readers see the catalog through
``/library``, which only ever lists published books.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from readingclub.api.v1.deps import get_catalog_service, require_admin
from readingclub.models.book import Book
from readingclub.models.user import User
from readingclub.schemas.book import BookCreate, BookRead, BookUpdate
from readingclub.services.catalog import CatalogService

router = APIRouter(prefix="/admin/books", tags=["books"])
logger = logging.getLogger(__name__)


@router.get("", response_model=list[BookRead])
async def list_books(
    catalog: CatalogService = Depends(get_catalog_service),
    _admin: User = Depends(require_admin),
) -> list[Book]:
    """Every book, drafts included."""
    return await catalog.list_all()


@router.post("", response_model=BookRead, status_code=201)
async def create_book(
    body: BookCreate,
    catalog: CatalogService = Depends(get_catalog_service),
    _admin: User = Depends(require_admin),
) -> Book:
    return await catalog.create_book(body.model_dump())


@router.get("/{book_id}", response_model=BookRead)
async def get_book(
    book_id: int,
    catalog: CatalogService = Depends(get_catalog_service),
    _admin: User = Depends(require_admin),
) -> Book:
    return await catalog.get(book_id)


@router.put("/{book_id}", response_model=BookRead)
async def update_book(
    book_id: int,
    body: BookUpdate,
    catalog: CatalogService = Depends(get_catalog_service),
    _admin: User = Depends(require_admin),
) -> Book:
    return await catalog.update_book(book_id, body.model_dump(exclude_unset=True))


@router.patch("/{book_id}/publish", response_model=BookRead)
async def toggle_publish(
    book_id: int,
    catalog: CatalogService = Depends(get_catalog_service),
    _admin: User = Depends(require_admin),
) -> Book:
    """Flip the published flag. Publishing requires a complete record."""
    return await catalog.toggle_publish(book_id)
