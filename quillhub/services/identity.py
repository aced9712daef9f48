"""Credential → Principal resolution.

The user row is always looked up in the *home* tenant named by the
credential, never in the tenant the request happens to be browsing.
"""

import logging

from jose import JWTError

from quillhub.core.context import Principal, TenantContext
from quillhub.core.database import ConnectionRegistry
from quillhub.core.errors import InvalidCredential, PrincipalNotFound
from quillhub.core.security import decode_jwt
from quillhub.models.user import UserRole
from quillhub.services import users

logger = logging.getLogger(__name__)


class IdentityResolver:
    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry

    async def resolve(self, token: str, contextual: TenantContext | None = None) -> Principal:
        try:
            payload = decode_jwt(token)
        except JWTError as exc:
            raise InvalidCredential() from exc

        subject = payload.get("sub")
        home_tenant_id = payload.get("tid")
        if not isinstance(subject, str) or not isinstance(home_tenant_id, str):
            raise InvalidCredential("Malformed credential payload")

        home_database = self._registry.get_tenant_database_name(home_tenant_id)
        home_connection = await self._registry.get_tenant_connection(home_database)
        user = await users.find_by_id(home_connection, subject)

        if user is not None and user.is_active:
            return Principal(
                id=user.id,
                email=user.email,
                username=user.username,
                display_name=user.display_name,
                role=str(user.role),
                tenant_id=home_tenant_id,
                bio=user.bio,
                avatar=user.avatar,
                tagline=user.tagline,
                location=user.location,
            )

        # Owner of the tenant being browsed, before their user row exists.
        if contextual is not None and contextual.tenant.owner_user_id == subject:
            username = payload.get("username") or contextual.tenant.owner_username
            return Principal(
                id=subject,
                email=payload.get("email") or "",
                username=username,
                display_name=username,
                role=str(UserRole.OWNER),
                tenant_id=home_tenant_id,
                persisted=False,
            )

        logger.warning("Principal validation failed for sub %s (home tenant %s)", subject, home_tenant_id)
        raise PrincipalNotFound()
