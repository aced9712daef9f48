"""Import all models so SQLModel.metadata picks them up.

Control-plane tables and tenant tables share one metadata object but are
created in different databases, so each group is listed explicitly.
"""

from quillhub.models.feed_item import FeedItem, FeedItemRead
from quillhub.models.tenant import (
    Tenant,
    TenantCreate,
    TenantPlan,
    TenantRead,
    TenantStatus,
    TenantTheme,
    TenantUpdate,
)
from quillhub.models.user import User, UserCreate, UserRead, UserRole

CONTROL_PLANE_TABLES = [Tenant.__table__, FeedItem.__table__]
TENANT_TABLES = [User.__table__]

__all__ = [
    "CONTROL_PLANE_TABLES",
    "FeedItem",
    "FeedItemRead",
    "TENANT_TABLES",
    "Tenant",
    "TenantCreate",
    "TenantPlan",
    "TenantRead",
    "TenantStatus",
    "TenantTheme",
    "TenantUpdate",
    "User",
    "UserCreate",
    "UserRead",
    "UserRole",
]
