"""V1 API router aggregation."""

from fastapi import APIRouter, Depends

from quillhub.api.deps import resolve_tenant
from quillhub.api.v1.auth import router as auth_router
from quillhub.api.v1.feed import router as feed_router
from quillhub.api.v1.tenants import router as tenants_router

# Tenant resolution runs for every v1 request, ahead of any auth dependency.
v1_router = APIRouter(prefix="/v1", dependencies=[Depends(resolve_tenant)])
v1_router.include_router(tenants_router)
v1_router.include_router(auth_router)
v1_router.include_router(feed_router)
