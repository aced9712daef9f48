"""Tenant header resolution on every v1 request."""

import pytest
from httpx import AsyncClient

from quillhub.models.tenant import TenantStatus
from quillhub.services import users


@pytest.mark.asyncio
async def test_no_header_passes_through(client: AsyncClient):
    resp = await client.get("/v1/feed")
    assert resp.status_code == 200
    assert resp.json() == []


@pytest.mark.asyncio
async def test_unknown_tenant_rejected(client: AsyncClient):
    resp = await client.get("/v1/feed", headers={"x-tenant-id": "nope"})
    assert resp.status_code == 404
    assert resp.json()["reason"] == "tenant_not_found"


@pytest.mark.asyncio
async def test_suspended_tenant_rejected(client: AsyncClient, directory, home_tenant):
    await directory.update(home_tenant.id, {"status": TenantStatus.SUSPENDED})

    resp = await client.get("/v1/feed", headers={"x-tenant-id": home_tenant.id})
    assert resp.status_code == 403
    assert resp.json()["reason"] == "tenant_inactive"


@pytest.mark.asyncio
async def test_valid_header_attaches_tenant_connection(client: AsyncClient, registry, home_tenant):
    await registry.shutdown()
    await registry.get_control_plane_connection()
    assert registry.cached_database_names() == []

    resp = await client.get("/v1/feed", headers={"x-tenant-id": home_tenant.id})
    assert resp.status_code == 200
    assert registry.cached_database_names() == [home_tenant.database_name]


@pytest.mark.asyncio
async def test_tenant_scoped_route_requires_header(client: AsyncClient):
    resp = await client.post("/v1/auth/login", json={
        "username_or_email": "someone",
        "password": "whatever1",
    })
    assert resp.status_code == 400
    assert resp.json()["reason"] == "tenant_context_required"


@pytest.mark.asyncio
async def test_registration_lands_in_header_tenant(client: AsyncClient, registry, home_tenant):
    resp = await client.post(
        "/v1/auth/register",
        json={"email": "hal@quill.dev", "username": "hal", "password": "password123"},
        headers={"x-tenant-id": home_tenant.id},
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["tenant_id"] == home_tenant.id

    connection = await registry.get_tenant_connection(home_tenant.database_name)
    stored = await users.find_by_id(connection, body["user"]["id"])
    assert stored is not None
    assert stored.username == "hal"


@pytest.mark.asyncio
async def test_health_reports_cached_connections(client: AsyncClient, home_tenant):
    resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["tenant_connections"] >= 1
