"""Credential resolution against home and contextual tenants."""

from datetime import timedelta

import pytest

from quillhub.core.context import TenantContext
from quillhub.core.errors import InvalidCredential, PrincipalNotFound
from quillhub.core.security import create_jwt
from quillhub.models.tenant import TenantCreate
from quillhub.models.user import UserCreate
from quillhub.services import users
from quillhub.services.identity import IdentityResolver


async def _context(registry, tenant) -> TenantContext:
    return TenantContext(tenant, await registry.get_tenant_connection(tenant.database_name))


async def _register(registry, tenant, username: str):
    connection = await registry.get_tenant_connection(tenant.database_name)
    return await users.register(
        connection,
        UserCreate(email=f"{username}@quill.dev", username=username, password="password123"),
    )


@pytest.mark.asyncio
async def test_resolves_user_from_home_tenant(registry, home_tenant):
    user = await _register(registry, home_tenant, "carol")
    token = create_jwt(user.id, home_tenant.id, username="stale-name", role="admin")

    principal = await IdentityResolver(registry).resolve(token)

    assert principal.id == user.id
    assert principal.username == "carol"  # live row, not the claim
    assert principal.role == "reader"
    assert principal.tenant_id == home_tenant.id
    assert principal.persisted is True


@pytest.mark.asyncio
async def test_cross_tenant_browsing_keeps_home_identity(registry, lifecycle, home_tenant):
    """A user of H stays authenticated while the request targets tenant C."""
    user = await _register(registry, home_tenant, "dave")
    other = await lifecycle.create(TenantCreate(slug="other", name="Other"), "someone", "someone")
    token = create_jwt(user.id, home_tenant.id)

    principal = await IdentityResolver(registry).resolve(token, await _context(registry, other))

    assert principal.id == user.id
    assert principal.tenant_id == home_tenant.id


@pytest.mark.asyncio
async def test_bootstrap_owner_of_contextual_tenant(registry, lifecycle, home_tenant):
    """Owner of C with no user row in H is let in as owner; tenant_id stays H."""
    owned = await lifecycle.create(
        TenantCreate(slug="fresh-blog", name="Fresh"), "new-owner", "newbie"
    )
    token = create_jwt("new-owner", home_tenant.id, email="n@quill.dev", username="newbie")

    principal = await IdentityResolver(registry).resolve(token, await _context(registry, owned))

    assert principal.id == "new-owner"
    assert principal.role == "owner"
    assert principal.tenant_id == home_tenant.id
    assert principal.email == "n@quill.dev"
    assert principal.persisted is False


@pytest.mark.asyncio
async def test_stranger_rejected(registry, lifecycle, home_tenant):
    other = await lifecycle.create(TenantCreate(slug="guarded", name="G"), "real-owner", "ro")
    token = create_jwt("intruder", home_tenant.id)

    with pytest.raises(PrincipalNotFound):
        await IdentityResolver(registry).resolve(token, await _context(registry, other))
    with pytest.raises(PrincipalNotFound):
        await IdentityResolver(registry).resolve(token)


@pytest.mark.asyncio
async def test_lookup_uses_home_database_not_contextual(registry, lifecycle, home_tenant):
    """A row in the contextual tenant must not authenticate a credential homed elsewhere."""
    other = await lifecycle.create(TenantCreate(slug="elsewhere", name="E"), "someone", "s")
    local_user = await _register(registry, other, "erin")
    token = create_jwt(local_user.id, home_tenant.id)

    with pytest.raises(PrincipalNotFound):
        await IdentityResolver(registry).resolve(token, await _context(registry, other))


@pytest.mark.asyncio
async def test_inactive_user_rejected(registry, home_tenant):
    user = await _register(registry, home_tenant, "frank")
    connection = await registry.get_tenant_connection(home_tenant.database_name)
    async with connection.session() as session:
        row = await session.get(type(user), user.id)
        row.is_active = False
        session.add(row)
        await session.commit()

    with pytest.raises(PrincipalNotFound):
        await IdentityResolver(registry).resolve(create_jwt(user.id, home_tenant.id))


@pytest.mark.asyncio
async def test_garbage_token_rejected(registry):
    with pytest.raises(InvalidCredential):
        await IdentityResolver(registry).resolve("not-a-jwt")


@pytest.mark.asyncio
async def test_expired_token_rejected(registry, home_tenant):
    user = await _register(registry, home_tenant, "grace")
    token = create_jwt(user.id, home_tenant.id, expires_delta=timedelta(seconds=-5))

    with pytest.raises(InvalidCredential):
        await IdentityResolver(registry).resolve(token)
