"""
App wiring: health check, admin seeding, error envelope.
"""

import json

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from conftest import API
from readingclub.core.exceptions import UpstreamError, _domain_error_handler
from readingclub.core.security import verify_pin
from readingclub.db.session import engine_options
from readingclub.models.user import User
from readingclub.services.auth import AuthService


@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    resp = await async_client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "db": True}


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/does-not-exist")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Not Found"}


@pytest.mark.asyncio
async def test_validation_error_lists_every_field(async_client: AsyncClient):
    resp = await async_client.post(f"{API}/login", json={})
    assert resp.status_code == 400
    fields = {e["field"] for e in resp.json()["errors"]}
    assert fields == {"body.email", "body.pin"}


@pytest.mark.asyncio
async def test_ensure_admin_seeds_once(db_session: AsyncSession):
    auth = AuthService(db_session)
    assert await auth.ensure_admin("Boss@ReadingClub.local", "140181") is True
    assert await auth.ensure_admin("boss@readingclub.local", "999999") is False

    result = await db_session.execute(select(User).where(User.role == "admin"))
    admins = result.scalars().all()
    assert len(admins) == 1
    assert admins[0].email == "boss@readingclub.local"
    assert verify_pin("140181", admins[0].hashed_pin)
    assert admins[0].welcome_seen is True


@pytest.mark.asyncio
async def test_upstream_error_hides_detail():
    resp = await _domain_error_handler(None, UpstreamError("processor timeout: pm_123"))
    assert resp.status_code == 502
    assert json.loads(resp.body) == {
        "success": False,
        "error": "Upstream service unavailable",
    }


def test_engine_options_per_backend():
    pg = engine_options("postgresql+asyncpg://u:p@db:5432/readingclub")
    assert pg["pool_size"] == 20
    assert "poolclass" not in pg

    memory = engine_options("sqlite+aiosqlite:///:memory:")
    assert memory["poolclass"] is StaticPool
    assert "pool_size" not in memory

    on_disk = engine_options("sqlite+aiosqlite:///./readingclub.db")
    assert "poolclass" not in on_disk
    assert on_disk["pool_pre_ping"] is True
