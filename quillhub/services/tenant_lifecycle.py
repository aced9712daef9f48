"""Tenant provisioning and teardown.

There is no transaction spanning the control plane and a tenant database,
so both sequences are ordered steps. Directory writes are authoritative;
the feed purge, the database drop and search ingestion are best-effort and
only logged on failure.
"""

import logging

from sqlalchemy.exc import IntegrityError

from quillhub.core.config import Settings, get_settings
from quillhub.core.database import ConnectionRegistry
from quillhub.core.errors import (
    NotAuthorized,
    OwnerNotFound,
    SlugReserved,
    SlugTaken,
    TenantNotFound,
)
from quillhub.core.tasks import fire_and_forget
from quillhub.models.base import new_id
from quillhub.models.tenant import Tenant, TenantCreate, TenantPlan, TenantStatus, TenantUpdate
from quillhub.services import users
from quillhub.services.feed_index import FeedIndex
from quillhub.services.ingestion import IngestionClient
from quillhub.services.tenant_directory import TenantDirectory

logger = logging.getLogger(__name__)


class TenantLifecycle:
    def __init__(
        self,
        registry: ConnectionRegistry,
        directory: TenantDirectory,
        feed: FeedIndex,
        ingestion: IngestionClient,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._registry = registry
        self._directory = directory
        self._feed = feed
        self._ingestion = ingestion
        self._reserved = {slug.lower() for slug in settings.reserved_tenant_slugs}

    def is_reserved(self, slug: str) -> bool:
        return slug.lower() in self._reserved

    async def is_slug_available(self, slug: str) -> bool:
        if self.is_reserved(slug):
            return False
        return await self._directory.find_by_slug(slug) is None

    async def create(
        self,
        data: TenantCreate,
        owner_user_id: str,
        owner_username: str | None = None,
        *,
        owner_tenant_id: str | None = None,
    ) -> Tenant:
        """Register a tenant and provision its database.

        ``owner_tenant_id`` is the owner's home tenant; it is only consulted
        when ``owner_username`` has to be looked up.
        """
        logger.info("Creating tenant %s for owner %s (%s)", data.slug, owner_username, owner_user_id)

        if self.is_reserved(data.slug):
            raise SlugReserved(f"Tenant slug '{data.slug}' is reserved")
        if await self._directory.find_by_slug(data.slug) is not None:
            raise SlugTaken(f"Tenant slug '{data.slug}' is already taken")

        if not owner_username:
            owner_username = await self._lookup_owner_username(owner_user_id, owner_tenant_id)

        # The database name is derived from the id, so allocate it first.
        tenant_id = new_id()
        tenant = Tenant(
            id=tenant_id,
            slug=data.slug,
            name=data.name,
            description=data.description,
            theme=data.theme,
            logo=data.logo,
            owner_user_id=owner_user_id,
            owner_username=owner_username,
            database_name=self._registry.get_tenant_database_name(tenant_id),
            status=TenantStatus.ACTIVE,
            plan=TenantPlan.FREE,
        )
        try:
            tenant = await self._directory.create(tenant)
        except IntegrityError as exc:
            # Lost a race on the unique slug index.
            raise SlugTaken(f"Tenant slug '{data.slug}' is already taken") from exc
        await self._registry.create_tenant_database(tenant_id)

        fire_and_forget(
            self._ingestion.ingest_entity(
                "tenant",
                tenant.id,
                {
                    "slug": tenant.slug,
                    "name": tenant.name,
                    "description": tenant.description,
                    "owner_username": tenant.owner_username,
                },
            ),
            name=f"ingest-tenant-{tenant.id}",
        )
        return tenant

    async def update(self, tenant_id: str, user_id: str, changes: TenantUpdate) -> Tenant:
        tenant = await self._require_owned(tenant_id, user_id)
        updated = await self._directory.update(tenant.id, changes.model_dump(exclude_unset=True))
        if updated is None:
            raise TenantNotFound()
        return updated

    async def delete(self, tenant_id: str, user_id: str) -> None:
        tenant = await self._require_owned(tenant_id, user_id)

        try:
            await self._feed.delete_all_for_tenant(tenant.id)
        except Exception:
            logger.exception("Failed to purge feed items for tenant %s", tenant.id)

        try:
            await self._registry.drop_tenant_database(tenant.id)
        except Exception:
            logger.exception("Failed to drop database for tenant %s", tenant.id)

        await self._directory.delete(tenant.id)
        logger.info("Deleted tenant %s (%s)", tenant.slug, tenant.id)

    # ── Internal helpers ──────────────────────────────────────

    async def _require_owned(self, tenant_id: str, user_id: str) -> Tenant:
        tenant = await self._directory.find_by_id(tenant_id)
        if tenant is None:
            raise TenantNotFound()
        if tenant.owner_user_id != user_id:
            raise NotAuthorized()
        return tenant

    async def _lookup_owner_username(self, owner_user_id: str, owner_tenant_id: str | None) -> str:
        if owner_tenant_id is None:
            raise OwnerNotFound()
        home = await self._directory.find_by_id(owner_tenant_id)
        if home is None:
            raise OwnerNotFound()
        connection = await self._registry.get_tenant_connection(home.database_name)
        owner = await users.find_by_id(connection, owner_user_id)
        if owner is None:
            raise OwnerNotFound()
        return owner.username
