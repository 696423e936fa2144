"""Tests for structured error responses."""
from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from fitarc.api.main import app
from fitarc.services import plan_runtime


@pytest.mark.asyncio
async def test_404_returns_structured_error(client):
    resp = await client.get("/api/v1/users/u1/plans/nonexistent-id-12345")
    assert resp.status_code == 404
    data = resp.json()
    assert "error" in data
    assert "message" in data


@pytest.mark.asyncio
async def test_unknown_route_uses_the_same_envelope(client):
    resp = await client.get("/api/v1/nothing-here")
    assert resp.status_code == 404
    assert set(resp.json()) == {"error", "message"}


@pytest.mark.asyncio
async def test_validation_error_returns_structured_error(client):
    """A malformed date should return 422 with clean error details."""
    resp = await client.get("/api/v1/users/u1/plans/p1/days/not-a-date")
    assert resp.status_code == 422
    data = resp.json()
    assert data["error"] == "validation_error"
    assert "details" in data
    assert isinstance(data["details"], list)


@pytest.mark.asyncio
async def test_missing_range_params(client):
    resp = await client.get("/api/v1/users/u1/plans/p1/days")
    assert resp.status_code == 422
    fields = [d["field"] for d in resp.json()["details"]]
    assert any("start" in f for f in fields)


@pytest.mark.asyncio
async def test_out_of_range_sets_rejected(client):
    resp = await client.put(
        "/api/v1/users/u1/plans/p1/days/2024-01-01",
        json={"elements": [{"exercise_id": "ex-1", "sets": 500}]},
    )
    assert resp.status_code == 422
    assert resp.json()["error"] == "validation_error"


@pytest.mark.asyncio
async def test_missing_plan_on_write_is_forbidden(client):
    resp = await client.put("/api/v1/users/u1/plans/missing/days/2024-01-01", json={"elements": []})
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_store_failure_returns_internal_error_envelope(ppl, monkeypatch):
    async def failing_commit(*args, **kwargs):
        raise OperationalError("DELETE FROM plan_overrides", {}, Exception("database is locked"))

    monkeypatch.setattr(plan_runtime, "commit_day", failing_commit)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.put("/api/v1/users/u1/plans/p1/days/2024-01-01", json={"elements": []})

    assert resp.status_code == 500
    data = resp.json()
    assert data["error"] == "internal_error"
    assert "database is locked" not in data["message"]
