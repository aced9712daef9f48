"""Shared test fixtures: a fresh connection registry on SQLite files + test client."""

from collections.abc import AsyncGenerator
from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from quillhub.api.deps import get_ingestion_client
from quillhub.core import tasks
from quillhub.core.config import Settings
from quillhub.core.database import ConnectionRegistry
from quillhub.main import app
from quillhub.models.tenant import TenantCreate
from quillhub.services.feed_index import FeedIndex
from quillhub.services.ingestion import IngestionClient
from quillhub.services.tenant_directory import TenantDirectory
from quillhub.services.tenant_lifecycle import TenantLifecycle

PREFIX = "quill_tenant_"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path}/control.db",
        tenant_database_prefix=PREFIX,
        ingestion_service_url="",
    )


@pytest.fixture
async def registry(settings) -> AsyncGenerator[ConnectionRegistry, None]:
    reg = ConnectionRegistry(settings)
    await reg.get_control_plane_connection()
    yield reg
    await tasks.drain()
    await reg.shutdown()


@pytest.fixture
def directory(registry) -> TenantDirectory:
    return TenantDirectory(registry)


@pytest.fixture
def feed(registry) -> FeedIndex:
    return FeedIndex(registry)


@pytest.fixture
def ingestion() -> MagicMock:
    """Ingestion client double; its async methods become AsyncMocks."""
    return MagicMock(spec=IngestionClient)


@pytest.fixture
def lifecycle(registry, directory, feed, ingestion, settings) -> TenantLifecycle:
    return TenantLifecycle(registry, directory, feed, ingestion, settings=settings)


@pytest.fixture
async def home_tenant(lifecycle):
    """A tenant whose database holds the accounts used by a test."""
    return await lifecycle.create(
        TenantCreate(slug="home", name="Home"),
        owner_user_id="platform-root",
        owner_username="root",
    )


@pytest.fixture
async def client(registry, ingestion) -> AsyncGenerator[AsyncClient, None]:
    """HTTPX async test client bound to the test registry."""
    app.state.registry = registry
    app.dependency_overrides[get_ingestion_client] = lambda: ingestion

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
