"""FastAPI dependencies for tenant resolution and authentication.

Order within a request: ``resolve_tenant`` (router-level, every request) →
``get_principal`` (declares ``resolve_tenant`` as a sub-dependency, so it
always sees the contextual tenant) → route handler.
"""

from typing import Annotated

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from quillhub.core.context import Principal, TenantContext
from quillhub.core.database import ConnectionRegistry
from quillhub.core.errors import (
    InvalidCredential,
    TenantContextRequired,
    TenantInactive,
    TenantNotFound,
)
from quillhub.services.feed_index import FeedIndex
from quillhub.services.identity import IdentityResolver
from quillhub.services.ingestion import IngestionClient
from quillhub.services.tenant_directory import TenantDirectory
from quillhub.services.tenant_lifecycle import TenantLifecycle

bearer_scheme = HTTPBearer(auto_error=False)


# ── Collaborators ─────────────────────────────────────────────

def get_registry(request: Request) -> ConnectionRegistry:
    return request.app.state.registry


def get_directory(
    registry: Annotated[ConnectionRegistry, Depends(get_registry)],
) -> TenantDirectory:
    return TenantDirectory(registry)


def get_feed_index(
    registry: Annotated[ConnectionRegistry, Depends(get_registry)],
) -> FeedIndex:
    return FeedIndex(registry)


def get_ingestion_client() -> IngestionClient:
    return IngestionClient()


def get_lifecycle(
    registry: Annotated[ConnectionRegistry, Depends(get_registry)],
    directory: Annotated[TenantDirectory, Depends(get_directory)],
    feed: Annotated[FeedIndex, Depends(get_feed_index)],
    ingestion: Annotated[IngestionClient, Depends(get_ingestion_client)],
) -> TenantLifecycle:
    return TenantLifecycle(registry, directory, feed, ingestion)


# ── Tenant resolution ─────────────────────────────────────────

async def resolve_tenant(
    request: Request,
    registry: Annotated[ConnectionRegistry, Depends(get_registry)],
    directory: Annotated[TenantDirectory, Depends(get_directory)],
    x_tenant_id: Annotated[str | None, Header()] = None,
) -> TenantContext | None:
    """Attach the tenant named by ``x-tenant-id`` (if any) to the request."""
    if not x_tenant_id:
        request.state.tenant_context = None
        return None

    tenant = await directory.find_by_id(x_tenant_id)
    if tenant is None:
        raise TenantNotFound(f"Tenant '{x_tenant_id}' not found")
    if not tenant.is_active:
        raise TenantInactive()

    connection = await registry.get_tenant_connection(tenant.database_name)
    context = TenantContext(tenant, connection)
    request.state.tenant_context = context
    return context


async def require_tenant(
    context: Annotated[TenantContext | None, Depends(resolve_tenant)],
) -> TenantContext:
    if context is None:
        raise TenantContextRequired()
    return context


# ── Authentication ────────────────────────────────────────────

async def get_principal(
    request: Request,
    registry: Annotated[ConnectionRegistry, Depends(get_registry)],
    context: Annotated[TenantContext | None, Depends(resolve_tenant)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> Principal:
    if credentials is None:
        raise InvalidCredential("Missing bearer credential")

    principal = await IdentityResolver(registry).resolve(credentials.credentials, context)
    request.state.principal = principal
    return principal


# Typed shorthand for use in route signatures
Registry = Annotated[ConnectionRegistry, Depends(get_registry)]
Directory = Annotated[TenantDirectory, Depends(get_directory)]
Feed = Annotated[FeedIndex, Depends(get_feed_index)]
Lifecycle = Annotated[TenantLifecycle, Depends(get_lifecycle)]
Ingestion = Annotated[IngestionClient, Depends(get_ingestion_client)]
OptionalTenant = Annotated[TenantContext | None, Depends(resolve_tenant)]
CurrentTenant = Annotated[TenantContext, Depends(require_tenant)]
CurrentPrincipal = Annotated[Principal, Depends(get_principal)]
