"""Global feed entry: cross-tenant aggregate kept in the control plane."""

from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from quillhub.models.base import TimestampMixin, new_id, utcnow


class FeedItem(TimestampMixin, SQLModel, table=True):
    __tablename__ = "feed_items"
    __table_args__ = (UniqueConstraint("tenant_id", "post_id", name="uq_feed_tenant_post"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    tenant_id: str = Field(max_length=32, nullable=False, index=True)
    tenant_slug: str = Field(max_length=100, nullable=False)
    tenant_name: str = Field(max_length=255, nullable=False)
    post_id: str = Field(max_length=64, nullable=False, index=True)
    post_slug: str = Field(max_length=255, nullable=False)
    title: str = Field(max_length=500, nullable=False)
    excerpt: str | None = Field(default=None)
    author_id: str = Field(max_length=64, nullable=False, index=True)
    author_username: str = Field(max_length=100, nullable=False)
    published_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)
    likes_count: int = Field(default=0)
    comments_count: int = Field(default=0)


class FeedItemRead(SQLModel):
    tenant_id: str
    tenant_slug: str
    tenant_name: str
    post_id: str
    post_slug: str
    title: str
    excerpt: str | None
    author_id: str
    author_username: str
    published_at: datetime
    likes_count: int
    comments_count: int
