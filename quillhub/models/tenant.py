"""Tenant model: one blog, backed by its own database."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, field_validator
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel

from quillhub.models.base import TimestampMixin, new_id

SLUG_PATTERN = r"^[a-z0-9\-]+$"


class TenantStatus(StrEnum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    DELETED = "deleted"


class TenantPlan(StrEnum):
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class TenantTheme(StrEnum):
    CLASSIC = "classic"
    CYBER = "cyber"
    SAKURA = "sakura"
    RONIN = "ronin"
    OCTANE = "octane"
    JOURNAL = "journal"
    TECHIE = "techie"
    PROFESSIONAL = "professional"
    TERMINAL = "terminal"
    NOIR = "noir"


class Tenant(TimestampMixin, SQLModel, table=True):
    """Control-plane directory row.

    ``database_name`` is derived from ``id`` when the row is created and
    never changes afterwards.
    """

    __tablename__ = "tenants"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    slug: str = Field(max_length=100, unique=True, nullable=False, index=True)
    custom_domain: str | None = Field(default=None, max_length=255, unique=True, index=True)
    custom_domain_verified: bool = Field(default=False)

    name: str = Field(max_length=255, nullable=False)
    description: str | None = Field(default=None)
    theme: TenantTheme = Field(default=TenantTheme.CLASSIC)
    logo: str | None = Field(default=None, max_length=1024)

    owner_user_id: str = Field(max_length=64, nullable=False, index=True)
    owner_username: str = Field(max_length=100, nullable=False, index=True)
    database_name: str = Field(max_length=128, nullable=False, unique=True)

    status: TenantStatus = Field(default=TenantStatus.ACTIVE)
    plan: TenantPlan = Field(default=TenantPlan.FREE)
    deleted_at: datetime | None = Field(default=None)

    @property
    def is_active(self) -> bool:
        return self.status == TenantStatus.ACTIVE


# ── Pydantic schemas (read / create / update) ─────────────────

class TenantCreate(BaseModel):
    slug: str = PydanticField(min_length=1, max_length=100, pattern=SLUG_PATTERN)
    name: str = PydanticField(min_length=1, max_length=255)
    description: str | None = None
    theme: TenantTheme = TenantTheme.CLASSIC
    logo: str | None = PydanticField(default=None, max_length=1024)


class TenantUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    theme: TenantTheme | None = None
    logo: str | None = Field(default=None, max_length=1024)

    @field_validator("name", "theme")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class TenantRead(SQLModel):
    id: str
    slug: str
    name: str
    description: str | None
    theme: TenantTheme
    logo: str | None
    custom_domain: str | None
    custom_domain_verified: bool
    owner_user_id: str
    owner_username: str
    database_name: str
    status: TenantStatus
    plan: TenantPlan
    created_at: datetime
    updated_at: datetime
