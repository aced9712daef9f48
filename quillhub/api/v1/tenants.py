"""Tenant (blog) endpoints."""

from fastapi import APIRouter, Query, status
from pydantic import BaseModel

from quillhub.api.deps import CurrentPrincipal, Directory, Lifecycle
from quillhub.core.errors import TenantNotFound
from quillhub.models.tenant import TenantCreate, TenantRead, TenantUpdate

router = APIRouter(prefix="/tenants", tags=["tenants"])


class SlugAvailability(BaseModel):
    slug: str
    available: bool


# ── Routes ────────────────────────────────────────────────────

@router.post(
    "",
    response_model=TenantRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new tenant (blog)",
)
async def create_tenant(
    body: TenantCreate,
    principal: CurrentPrincipal,
    lifecycle: Lifecycle,
) -> TenantRead:
    """Create a tenant owned by the caller and provision its database."""
    tenant = await lifecycle.create(
        body,
        owner_user_id=principal.id,
        owner_username=principal.username,
        owner_tenant_id=principal.tenant_id,
    )
    return TenantRead.model_validate(tenant)


@router.get("/me", response_model=list[TenantRead], summary="Tenants owned by the caller")
async def list_my_tenants(principal: CurrentPrincipal, directory: Directory) -> list[TenantRead]:
    return [TenantRead.model_validate(t) for t in await directory.find_by_owner(principal.id)]


@router.get("/check-slug", response_model=SlugAvailability)
async def check_slug(
    lifecycle: Lifecycle,
    slug: str = Query(min_length=1, max_length=100),
) -> SlugAvailability:
    return SlugAvailability(slug=slug, available=await lifecycle.is_slug_available(slug))


@router.get("/user/{user_id}", response_model=list[TenantRead])
async def list_tenants_by_owner(user_id: str, directory: Directory) -> list[TenantRead]:
    return [TenantRead.model_validate(t) for t in await directory.find_by_owner(user_id)]


@router.get("/{slug}", response_model=TenantRead, summary="Find tenant by slug or owner username")
async def get_tenant(slug: str, directory: Directory) -> TenantRead:
    tenant = await directory.find_by_slug(slug)
    if tenant is None:
        tenant = await directory.find_by_owner_username(slug)
    if tenant is None:
        raise TenantNotFound()
    return TenantRead.model_validate(tenant)


@router.patch("/{tenant_id}", response_model=TenantRead)
async def update_tenant(
    tenant_id: str,
    body: TenantUpdate,
    principal: CurrentPrincipal,
    lifecycle: Lifecycle,
) -> TenantRead:
    tenant = await lifecycle.update(tenant_id, principal.id, body)
    return TenantRead.model_validate(tenant)


@router.delete("/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tenant(
    tenant_id: str,
    principal: CurrentPrincipal,
    lifecycle: Lifecycle,
) -> None:
    """Owner-only. Purges the feed, drops the database, removes the row."""
    await lifecycle.delete(tenant_id, principal.id)
