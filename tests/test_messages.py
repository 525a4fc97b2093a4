"""
Contact form intake and the admin messaging console.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import API, create_user

CONTACT = {
    "name": "Claire Moreau",
    "email": "Claire@Example.com",
    "subject": "Question sur mon abonnement",
    "message": "Bonjour, comment changer de moyen de paiement ?",
}


@pytest.mark.asyncio
async def test_contact_is_public(async_client: AsyncClient):
    resp = await async_client.post(f"{API}/contact", json=CONTACT)
    assert resp.status_code == 201
    assert resp.json()["success"] is True
    assert resp.json()["id"] > 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [{"name": "  "}, {"subject": ""}, {"message": "   "}, {"email": "claire"}],
)
async def test_contact_validation(async_client: AsyncClient, overrides):
    resp = await async_client.post(f"{API}/contact", json={**CONTACT, **overrides})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_admin_reads_and_marks_messages(async_client: AsyncClient, admin_headers):
    created = await async_client.post(f"{API}/contact", json=CONTACT)
    msg_id = created.json()["id"]

    inbox = await async_client.get(f"{API}/admin/messages", headers=admin_headers)
    assert inbox.status_code == 200
    assert len(inbox.json()) == 1
    assert inbox.json()[0]["email"] == "claire@example.com"
    assert inbox.json()[0]["is_read"] is False

    marked = await async_client.patch(
        f"{API}/admin/messages/{msg_id}/read", headers=admin_headers
    )
    assert marked.status_code == 200
    assert marked.json()["is_read"] is True

    # Marking twice is harmless
    again = await async_client.patch(
        f"{API}/admin/messages/{msg_id}/read", headers=admin_headers
    )
    assert again.status_code == 200
    assert again.json()["is_read"] is True


@pytest.mark.asyncio
async def test_message_status_filter(async_client: AsyncClient, admin_headers):
    first = await async_client.post(f"{API}/contact", json=CONTACT)
    await async_client.post(f"{API}/contact", json={**CONTACT, "subject": "Autre question"})
    await async_client.patch(
        f"{API}/admin/messages/{first.json()['id']}/read", headers=admin_headers
    )

    unread = await async_client.get(f"{API}/admin/messages?status=unread", headers=admin_headers)
    read = await async_client.get(f"{API}/admin/messages?status=read", headers=admin_headers)
    everything = await async_client.get(f"{API}/admin/messages", headers=admin_headers)
    assert [m["subject"] for m in unread.json()] == ["Autre question"]
    assert [m["id"] for m in read.json()] == [first.json()["id"]]
    assert len(everything.json()) == 2


@pytest.mark.asyncio
async def test_message_status_filter_rejects_unknown_value(
    async_client: AsyncClient, admin_headers
):
    resp = await async_client.get(f"{API}/admin/messages?status=archived", headers=admin_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_mark_unknown_message(async_client: AsyncClient, admin_headers):
    resp = await async_client.patch(f"{API}/admin/messages/999/read", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == "Message not found"


# ── Notifications ───────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_send_notification_counts_opted_in_users(
    async_client: AsyncClient, admin_headers, client_user, db_session: AsyncSession
):
    await create_user(db_session, "silent@example.com", notifications_accepted=False)

    resp = await async_client.post(
        f"{API}/admin/notifications",
        json={"title": "Nouveau livre", "message": "Le polar de la semaine est en ligne !"},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["sent_count"] == 1
    assert data["status"] == "sent"
    assert data["title"] == "Nouveau livre"

    overview = await async_client.get(f"{API}/admin/notifications", headers=admin_headers)
    assert overview.status_code == 200
    assert overview.json()["subscriber_count"] == 1
    assert overview.json()["total_sent"] == 1
    assert overview.json()["history"][0]["id"] == data["id"]


@pytest.mark.asyncio
async def test_notification_count_is_a_snapshot(
    async_client: AsyncClient, admin_headers, client_user, db_session: AsyncSession
):
    await async_client.post(
        f"{API}/admin/notifications",
        json={"title": "Bienvenue", "message": "Merci de nous lire."},
        headers=admin_headers,
    )
    await create_user(db_session, "late@example.com", notifications_accepted=True)

    overview = await async_client.get(f"{API}/admin/notifications", headers=admin_headers)
    assert overview.json()["subscriber_count"] == 2
    assert overview.json()["history"][0]["sent_count"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"title": "", "message": "Texte"},
        {"title": "Titre", "message": "x" * 501},
        {"title": "t" * 201, "message": "Texte"},
    ],
)
async def test_notification_validation(async_client: AsyncClient, admin_headers, body):
    resp = await async_client.post(f"{API}/admin/notifications", json=body, headers=admin_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_notifications_admin_only(async_client: AsyncClient, user_headers):
    resp = await async_client.post(
        f"{API}/admin/notifications",
        json={"title": "Spam", "message": "Non"},
        headers=user_headers,
    )
    assert resp.status_code == 403
