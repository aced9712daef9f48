"""FastAPI application entrypoint."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from quillhub.api.v1 import v1_router
from quillhub.core import tasks
from quillhub.core.config import get_settings
from quillhub.core.database import ConnectionRegistry
from quillhub.core.errors import register_exception_handlers
from quillhub.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    registry = ConnectionRegistry(get_settings())
    # A control plane that cannot be reached is fatal at startup.
    await registry.get_control_plane_connection()
    app.state.registry = registry
    yield
    await tasks.drain()
    await registry.shutdown()


app = FastAPI(
    title="Quillhub",
    version="0.1.0",
    description="Multi-tenant publishing platform API",
    lifespan=lifespan,
)

register_exception_handlers(app)

# ── CORS ─────────────────────────────────────────────────────
_settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in _settings.allowed_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Content-Type", "Authorization", "x-tenant-id"],
)

# ── API routes ───────────────────────────────────────────────
app.include_router(v1_router)


@app.get("/health", tags=["system"])
async def health_check(request: Request) -> dict:
    registry: ConnectionRegistry = request.app.state.registry
    return {
        "status": "ok",
        "tenant_connections": len(registry.cached_database_names()),
    }
