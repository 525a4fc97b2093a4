"""
Catalog administration and the reader-facing library listing.
"""

from datetime import datetime, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import API, auth_headers, create_book, create_user
from readingclub.models.book import Book
from readingclub.services.catalog import missing_publish_fields

COMPLETE_BOOK = {
    "title": "Les Jardins de Provence",
    "author": "Sophie Laurent",
    "genre": "romance",
    "editorialSummary": "Une histoire d'amour entre lavande et oliviers.",
    "contentUrl": "https://example.com/books/jardins",
    "publishedAt": "2025-01-10T08:00:00Z",
}


# ── Admin CRUD ──────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_create_published_book(async_client: AsyncClient, admin_headers):
    resp = await async_client.post(
        f"{API}/admin/books", json={**COMPLETE_BOOK, "isPublished": True}, headers=admin_headers
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["id"] > 0
    assert data["is_published"] is True
    assert data["genre"] == "romance"
    assert data["content_url"] == "https://example.com/books/jardins"


@pytest.mark.asyncio
async def test_create_draft_with_partial_fields(async_client: AsyncClient, admin_headers):
    resp = await async_client.post(
        f"{API}/admin/books", json={"title": "Brouillon"}, headers=admin_headers
    )
    assert resp.status_code == 201
    assert resp.json()["is_published"] is False
    assert resp.json()["author"] is None


@pytest.mark.asyncio
async def test_cannot_create_incomplete_published_book(async_client: AsyncClient, admin_headers):
    resp = await async_client.post(
        f"{API}/admin/books",
        json={"title": "Incomplet", "author": "X", "isPublished": True},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error.startswith("Cannot publish, missing fields:")
    assert "genre" in error
    assert "content_url" in error


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"title": "   "},
        {"title": "Roman", "genre": "poesie"},
        {"author": "Sans titre"},
    ],
)
async def test_create_book_validation(async_client: AsyncClient, admin_headers, body):
    resp = await async_client.post(f"{API}/admin/books", json=body, headers=admin_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_publish_toggle_requires_complete_record(async_client: AsyncClient, admin_headers):
    created = await async_client.post(
        f"{API}/admin/books", json={"title": "Brouillon"}, headers=admin_headers
    )
    book_id = created.json()["id"]

    refused = await async_client.patch(
        f"{API}/admin/books/{book_id}/publish", headers=admin_headers
    )
    assert refused.status_code == 400

    still_draft = await async_client.get(f"{API}/admin/books/{book_id}", headers=admin_headers)
    assert still_draft.json()["is_published"] is False

    filled = await async_client.put(
        f"{API}/admin/books/{book_id}", json=COMPLETE_BOOK, headers=admin_headers
    )
    assert filled.status_code == 200

    published = await async_client.patch(
        f"{API}/admin/books/{book_id}/publish", headers=admin_headers
    )
    assert published.status_code == 200
    assert published.json()["is_published"] is True

    unpublished = await async_client.patch(
        f"{API}/admin/books/{book_id}/publish", headers=admin_headers
    )
    assert unpublished.json()["is_published"] is False


@pytest.mark.asyncio
async def test_update_cannot_blank_required_field_of_published_book(
    async_client: AsyncClient, admin_headers, db_session: AsyncSession
):
    book = await create_book(db_session)
    resp = await async_client.put(
        f"{API}/admin/books/{book.id}", json={"contentUrl": ""}, headers=admin_headers
    )
    assert resp.status_code == 400
    assert "content_url" in resp.json()["error"]


@pytest.mark.asyncio
async def test_partial_update_keeps_other_fields(
    async_client: AsyncClient, admin_headers, db_session: AsyncSession
):
    book = await create_book(db_session, weekly_rank=3)
    resp = await async_client.put(
        f"{API}/admin/books/{book.id}", json={"weeklyRank": 1}, headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json()["weekly_rank"] == 1
    assert resp.json()["title"] == book.title
    assert resp.json()["is_published"] is True


@pytest.mark.asyncio
async def test_admin_list_includes_drafts(
    async_client: AsyncClient, admin_headers, db_session: AsyncSession
):
    await create_book(db_session, title="Publié")
    await create_book(db_session, title="Brouillon", is_published=False)
    resp = await async_client.get(f"{API}/admin/books", headers=admin_headers)
    assert resp.status_code == 200
    assert {b["title"] for b in resp.json()} == {"Publié", "Brouillon"}


@pytest.mark.asyncio
async def test_book_not_found(async_client: AsyncClient, admin_headers):
    resp = await async_client.get(f"{API}/admin/books/424242", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Book not found"}


def test_missing_publish_fields():
    assert missing_publish_fields(
        Book(
            title="T",
            author="A",
            genre="sf",
            editorial_summary="S",
            content_url="u",
            published_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        )
    ) == []
    assert missing_publish_fields(Book(title="T", author="  ")) == [
        "author",
        "genre",
        "editorial_summary",
        "content_url",
        "published_at",
    ]


# ── Library ─────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_library_lists_only_published_newest_first(
    async_client: AsyncClient, user_headers, db_session: AsyncSession
):
    await create_book(
        db_session, title="Ancien", published_at=datetime(2024, 1, 1, tzinfo=timezone.utc)
    )
    await create_book(
        db_session, title="Récent", published_at=datetime(2025, 6, 1, tzinfo=timezone.utc)
    )
    await create_book(db_session, title="Caché", is_published=False)

    resp = await async_client.get(f"{API}/library", headers=user_headers)
    assert resp.status_code == 200
    titles = [b["title"] for b in resp.json()]
    assert titles == ["Récent", "Ancien"]
    assert all(b["is_published"] for b in resp.json())


@pytest.mark.asyncio
async def test_library_merges_reader_progress(
    async_client: AsyncClient, user_headers, db_session: AsyncSession
):
    opened = await create_book(db_session, title="Ouvert")
    await create_book(db_session, title="Jamais ouvert")

    await async_client.post(f"{API}/library/{opened.id}/start-or-resume", headers=user_headers)
    await async_client.post(
        f"{API}/library/{opened.id}/progress",
        json={"progressPercent": 35, "lastChapter": "Chapitre 4", "lastPosition": 812},
        headers=user_headers,
    )

    resp = await async_client.get(f"{API}/library", headers=user_headers)
    by_title = {b["title"]: b for b in resp.json()}
    assert by_title["Ouvert"]["status"] == "in_progress"
    assert by_title["Ouvert"]["progress_percent"] == 35
    assert by_title["Jamais ouvert"]["status"] == "not_started"
    assert by_title["Jamais ouvert"]["progress_percent"] == 0


@pytest.mark.asyncio
async def test_library_progress_is_per_reader(
    async_client: AsyncClient, user_headers, db_session: AsyncSession
):
    book = await create_book(db_session)
    other = await create_user(db_session, "other@example.com")

    await async_client.post(f"{API}/library/{book.id}/complete", headers=user_headers)

    resp = await async_client.get(f"{API}/library", headers=auth_headers(other))
    assert resp.json()[0]["status"] == "not_started"


@pytest.mark.asyncio
async def test_library_requires_auth(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/library")
    assert resp.status_code == 401


# ── Update payload guards ───────────────────────────────────────────
@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body,fragment",
    [
        ({"isPublished": None}, "Published flag"),
        ({"title": None}, "Title must not be empty"),
        ({"title": "   "}, "Title must not be empty"),
    ],
)
async def test_update_rejects_null_or_blank_required_values(
    async_client: AsyncClient, admin_headers, db_session: AsyncSession, body, fragment
):
    book = await create_book(db_session, title="Brouillon", is_published=False)
    resp = await async_client.put(
        f"{API}/admin/books/{book.id}", json=body, headers=admin_headers
    )
    assert resp.status_code == 400
    assert fragment in resp.json()["error"]

    # Stored row untouched, listing still serialises
    listing = await async_client.get(f"{API}/admin/books", headers=admin_headers)
    assert listing.status_code == 200
    assert listing.json()[0]["title"] == "Brouillon"
    assert listing.json()[0]["is_published"] is False


@pytest.mark.asyncio
async def test_update_strips_title(
    async_client: AsyncClient, admin_headers, db_session: AsyncSession
):
    book = await create_book(db_session)
    resp = await async_client.put(
        f"{API}/admin/books/{book.id}", json={"title": "  Nouveau titre  "}, headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json()["title"] == "Nouveau titre"
