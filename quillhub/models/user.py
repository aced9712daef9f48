"""User model: lives inside a tenant database."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, EmailStr
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel

from quillhub.models.base import TimestampMixin, new_id

USERNAME_PATTERN = r"^[A-Za-z0-9_\-]+$"


class UserRole(StrEnum):
    OWNER = "owner"
    ADMIN = "admin"
    AUTHOR = "author"
    READER = "reader"


class User(TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    email: str = Field(max_length=320, nullable=False, unique=True, index=True)
    username: str = Field(max_length=100, nullable=False, unique=True, index=True)
    password_hash: str = Field(nullable=False)
    display_name: str = Field(default="", max_length=255)
    avatar: str | None = Field(default=None, max_length=1024)
    bio: str | None = Field(default=None)
    tagline: str | None = Field(default=None, max_length=255)
    location: str | None = Field(default=None, max_length=255)
    role: UserRole = Field(default=UserRole.READER)
    is_active: bool = Field(default=True)
    last_login_at: datetime | None = Field(default=None)


# ── Pydantic schemas ─────────────────────────────────────────

class UserCreate(BaseModel):
    email: EmailStr
    username: str = PydanticField(min_length=3, max_length=100, pattern=USERNAME_PATTERN)
    password: str = PydanticField(min_length=8, max_length=128)
    display_name: str = PydanticField(default="", max_length=255)


class UserRead(SQLModel):
    id: str
    email: str
    username: str
    display_name: str
    avatar: str | None
    bio: str | None
    tagline: str | None
    location: str | None
    role: UserRole
    is_active: bool
