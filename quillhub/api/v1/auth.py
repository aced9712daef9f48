"""Authentication endpoints: register, login, current principal.

Register and login act on the tenant named by ``x-tenant-id``; the issued
credential records that tenant as the holder's home tenant.
"""

from fastapi import APIRouter, status
from pydantic import BaseModel

from quillhub.api.deps import CurrentPrincipal, CurrentTenant, Ingestion
from quillhub.core.context import Principal
from quillhub.core.security import create_jwt
from quillhub.core.tasks import fire_and_forget
from quillhub.models.user import User, UserCreate, UserRead
from quillhub.services import users

router = APIRouter(prefix="/auth", tags=["auth"])


# ── Schemas ──────────────────────────────────────────────────

class LoginRequest(BaseModel):
    username_or_email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
    tenant_id: str


def _issue(user: User, tenant_id: str) -> TokenResponse:
    token = create_jwt(
        subject=user.id,
        tenant_id=tenant_id,
        email=user.email,
        username=user.username,
        role=str(user.role),
    )
    return TokenResponse(
        access_token=token,
        user=UserRead.model_validate(user),
        tenant_id=tenant_id,
    )


# ── Routes ───────────────────────────────────────────────────

@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: UserCreate,
    tenant: CurrentTenant,
    ingestion: Ingestion,
) -> TokenResponse:
    user = await users.register(tenant.connection, body)
    fire_and_forget(
        ingestion.ingest_entity(
            "user",
            user.id,
            {
                "tenant_id": tenant.tenant_id,
                "username": user.username,
                "display_name": user.display_name,
            },
        ),
        name=f"ingest-user-{user.id}",
    )
    return _issue(user, tenant.tenant_id)


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, tenant: CurrentTenant) -> TokenResponse:
    """Authenticate with username or email + password, receive a JWT."""
    user = await users.authenticate(tenant.connection, body.username_or_email, body.password)
    return _issue(user, tenant.tenant_id)


@router.get("/me", response_model=Principal)
async def get_me(principal: CurrentPrincipal) -> Principal:
    return principal
