"""Tenant directory: CRUD over control-plane tenant rows."""

from typing import Any

from sqlmodel import select

from quillhub.core.database import ConnectionRegistry
from quillhub.models.base import utcnow
from quillhub.models.tenant import Tenant


class TenantDirectory:
    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry

    async def create(self, tenant: Tenant) -> Tenant:
        control_plane = await self._registry.get_control_plane_connection()
        async with control_plane.session() as session:
            session.add(tenant)
            await session.commit()
            await session.refresh(tenant)
        return tenant

    async def find_by_id(self, tenant_id: str) -> Tenant | None:
        control_plane = await self._registry.get_control_plane_connection()
        async with control_plane.session() as session:
            return await session.get(Tenant, tenant_id)

    async def find_by_slug(self, slug: str) -> Tenant | None:
        return await self._find_one(Tenant.slug == slug)

    async def find_by_owner_username(self, owner_username: str) -> Tenant | None:
        return await self._find_one(Tenant.owner_username == owner_username)

    async def find_by_owner(self, owner_user_id: str) -> list[Tenant]:
        return await self._find_many(Tenant.owner_user_id == owner_user_id)

    async def find_all(self) -> list[Tenant]:
        return await self._find_many()

    async def update(self, tenant_id: str, changes: dict[str, Any]) -> Tenant | None:
        control_plane = await self._registry.get_control_plane_connection()
        async with control_plane.session() as session:
            tenant = await session.get(Tenant, tenant_id)
            if tenant is None:
                return None
            for field, value in changes.items():
                setattr(tenant, field, value)
            tenant.updated_at = utcnow()
            session.add(tenant)
            await session.commit()
            await session.refresh(tenant)
            return tenant

    async def delete(self, tenant_id: str) -> bool:
        control_plane = await self._registry.get_control_plane_connection()
        async with control_plane.session() as session:
            tenant = await session.get(Tenant, tenant_id)
            if tenant is None:
                return False
            await session.delete(tenant)
            await session.commit()
            return True

    # ── Internal helpers ──────────────────────────────────────

    async def _find_one(self, *criteria) -> Tenant | None:
        control_plane = await self._registry.get_control_plane_connection()
        async with control_plane.session() as session:
            result = await session.execute(select(Tenant).where(*criteria))
            return result.scalars().first()

    async def _find_many(self, *criteria) -> list[Tenant]:
        control_plane = await self._registry.get_control_plane_connection()
        stmt = select(Tenant).where(*criteria).order_by(Tenant.created_at.asc())  # type: ignore[attr-defined]
        async with control_plane.session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())
