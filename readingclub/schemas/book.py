"""Pydantic schemas for the catalog and reading progress."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from readingclub.models.book import GENRES

_ALIASED = {"populate_by_name": True}


def _check_genre(v: str | None) -> str | None:
    if v is not None and v not in GENRES:
        raise ValueError(f"Genre must be one of: {list(GENRES)}")
    return v


# ── Catalog ─────────────────────────────────────────────────────────
class BookCreate(BaseModel):
    title: str
    author: str | None = None
    genre: str | None = None
    editorial_summary: str | None = Field(default=None, alias="editorialSummary")
    content_url: str | None = Field(default=None, alias="contentUrl")
    published_at: datetime | None = Field(default=None, alias="publishedAt")
    is_published: bool = Field(default=False, alias="isPublished")
    weekly_rank: int | None = Field(default=None, alias="weeklyRank")

    model_config = _ALIASED

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title must not be empty")
        return v

    @field_validator("genre")
    @classmethod
    def _genre(cls, v: str | None) -> str | None:
        return _check_genre(v)


class BookUpdate(BaseModel):
    title: str | None = None
    author: str | None = None
    genre: str | None = None
    editorial_summary: str | None = Field(default=None, alias="editorialSummary")
    content_url: str | None = Field(default=None, alias="contentUrl")
    published_at: datetime | None = Field(default=None, alias="publishedAt")
    is_published: bool | None = Field(default=None, alias="isPublished")
    weekly_rank: int | None = Field(default=None, alias="weeklyRank")

    model_config = _ALIASED

    # Omitted fields stay untouched; these two may not be sent as null.
    @field_validator("title")
    @classmethod
    def _title(cls, v: str | None) -> str:
        if v is None or not v.strip():
            raise ValueError("Title must not be empty")
        return v.strip()

    @field_validator("is_published")
    @classmethod
    def _is_published(cls, v: bool | None) -> bool:
        if v is None:
            raise ValueError("Published flag must be true or false")
        return v

    @field_validator("genre")
    @classmethod
    def _genre(cls, v: str | None) -> str | None:
        return _check_genre(v)


class BookRead(BaseModel):
    id: int
    title: str
    author: str | None
    genre: str | None
    editorial_summary: str | None
    content_url: str | None
    published_at: datetime | None
    is_published: bool
    weekly_rank: int | None

    model_config = {"from_attributes": True}


class LibraryBook(BookRead):
    status: str
    progress_percent: float


# ── Reading progress ────────────────────────────────────────────────
class CheckpointRequest(BaseModel):
    progress_percent: float = Field(alias="progressPercent", ge=0, le=100)
    last_chapter: str | None = Field(default=None, alias="lastChapter", max_length=200)
    last_position: float = Field(default=0.0, alias="lastPosition", ge=0)

    model_config = _ALIASED


class ProgressRead(BaseModel):
    book_id: int
    status: str
    progress_percent: float
    last_chapter: str | None
    last_position: float
    updated_at: datetime | None

    model_config = {"from_attributes": True}


class ReadingSession(BaseModel):
    """What the reader needs to open (or reopen) a book."""

    success: bool = True
    content_url: str | None
    progress: ProgressRead
