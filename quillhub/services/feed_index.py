"""Global feed, a cross-tenant post index stored in the control plane.

Dropping a tenant database does not touch these rows; they must be purged
explicitly with ``delete_all_for_tenant``.
"""

import logging

from sqlalchemy import delete
from sqlmodel import select

from quillhub.core.database import ConnectionRegistry
from quillhub.models.base import utcnow
from quillhub.models.feed_item import FeedItem

logger = logging.getLogger(__name__)


class FeedIndex:
    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry

    async def upsert(self, item: FeedItem) -> FeedItem:
        """Insert or replace the entry for (tenant_id, post_id)."""
        control_plane = await self._registry.get_control_plane_connection()
        async with control_plane.session() as session:
            stmt = select(FeedItem).where(
                FeedItem.tenant_id == item.tenant_id,
                FeedItem.post_id == item.post_id,
            )
            existing = (await session.execute(stmt)).scalar_one_or_none()
            if existing is None:
                session.add(item)
                target = item
            else:
                data = item.model_dump(exclude={"id", "created_at", "updated_at"})
                for field, value in data.items():
                    setattr(existing, field, value)
                existing.updated_at = utcnow()
                session.add(existing)
                target = existing
            await session.commit()
            await session.refresh(target)
            return target

    async def latest(self, skip: int = 0, limit: int = 20) -> list[FeedItem]:
        control_plane = await self._registry.get_control_plane_connection()
        stmt = (
            select(FeedItem)
            .order_by(FeedItem.published_at.desc())  # type: ignore[attr-defined]
            .offset(skip)
            .limit(limit)
        )
        async with control_plane.session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def delete_all_for_tenant(self, tenant_id: str) -> int:
        control_plane = await self._registry.get_control_plane_connection()
        async with control_plane.session() as session:
            result = await session.execute(delete(FeedItem).where(FeedItem.tenant_id == tenant_id))
            await session.commit()
        deleted = result.rowcount or 0
        logger.info("Purged %d feed items for tenant %s", deleted, tenant_id)
        return deleted
