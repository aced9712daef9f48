"""Request-scoped identity and tenant context."""

from pydantic import BaseModel, ConfigDict

from quillhub.core.database import ConnectionHandle
from quillhub.models.tenant import Tenant


class TenantContext:
    """Contextual tenant of a request plus its live connection."""

    __slots__ = ("tenant", "connection")

    def __init__(self, tenant: Tenant, connection: ConnectionHandle) -> None:
        self.tenant = tenant
        self.connection = connection

    @property
    def tenant_id(self) -> str:
        return self.tenant.id


class Principal(BaseModel):
    """Resolved identity of the requester.

    ``tenant_id`` is the home tenant carried by the credential, which may
    differ from the contextual tenant of the request. ``persisted`` is False
    for a tenant owner authenticated before a user row exists for them.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    username: str
    display_name: str
    role: str
    tenant_id: str
    bio: str | None = None
    avatar: str | None = None
    tagline: str | None = None
    location: str | None = None
    persisted: bool = True
