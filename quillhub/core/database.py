"""Connection registry: one async engine per database.

The control-plane engine is opened at startup and lives for the process.
Tenant engines are opened lazily the first time their database name is
referenced and stay cached until the tenant database is dropped. At most
one handle exists per database name; concurrent first access converges on
a single in-flight open.
"""

import asyncio
import logging
import re
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from quillhub.core.config import Settings
from quillhub.core.errors import InvalidTenantDatabaseName
from quillhub.models import CONTROL_PLANE_TABLES, TENANT_TABLES

logger = logging.getLogger(__name__)

_DATABASE_NAME_RE = re.compile(r"^[A-Za-z0-9_\-]+$")


class ConnectionHandle:
    """Live, reusable connection to exactly one database.

    Handles are created, cached and disposed by ``ConnectionRegistry`` only.
    """

    __slots__ = ("database_name", "engine", "_session_factory")

    def __init__(self, database_name: str, engine: AsyncEngine) -> None:
        self.database_name = database_name
        self.engine = engine
        self._session_factory = sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    def session(self) -> AsyncSession:
        """New session bound to this database. Use as an async context manager."""
        return self._session_factory()

    def __repr__(self) -> str:
        return f"<ConnectionHandle {self.database_name}>"


class ConnectionRegistry:
    """Owns every database connection of the process."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._base_url: URL = make_url(settings.database_url)
        self._prefix = settings.tenant_database_prefix
        self._control_plane: ConnectionHandle | None = None
        self._control_plane_lock = asyncio.Lock()
        self._handles: dict[str, ConnectionHandle] = {}
        self._opening: dict[str, asyncio.Task[ConnectionHandle]] = {}

    # ── Naming ────────────────────────────────────────────────

    @property
    def tenant_database_prefix(self) -> str:
        return self._prefix

    def get_tenant_database_name(self, tenant_id: str) -> str:
        return f"{self._prefix}{tenant_id}"

    def cached_database_names(self) -> list[str]:
        return sorted(self._handles)

    # ── Control plane ─────────────────────────────────────────

    async def get_control_plane_connection(self) -> ConnectionHandle:
        if self._control_plane is not None:
            return self._control_plane

        async with self._control_plane_lock:
            if self._control_plane is None:
                if self._is_sqlite:
                    self._sqlite_dir.mkdir(parents=True, exist_ok=True)
                engine = self._create_engine(self._base_url)
                async with engine.begin() as conn:
                    await conn.run_sync(SQLModel.metadata.create_all, tables=CONTROL_PLANE_TABLES)
                self._control_plane = ConnectionHandle(
                    self._base_url.database or "", engine
                )
                logger.info("Control-plane database ready: %s", self._control_plane.database_name)
        return self._control_plane

    # ── Tenant databases ──────────────────────────────────────

    async def get_tenant_connection(self, database_name: str) -> ConnectionHandle:
        handle = self._handles.get(database_name)
        if handle is not None:
            return handle

        if (
            not database_name.startswith(self._prefix)
            or database_name == self._prefix
            or not _DATABASE_NAME_RE.match(database_name)
        ):
            raise InvalidTenantDatabaseName(f"Invalid tenant database name: {database_name}")

        opening = self._opening.get(database_name)
        if opening is None:
            opening = asyncio.create_task(
                self._open_tenant(database_name), name=f"open-{database_name}"
            )
            self._opening[database_name] = opening
        # A cancelled caller must not cancel the open other callers are waiting on.
        return await asyncio.shield(opening)

    async def create_tenant_database(self, tenant_id: str) -> str:
        database_name = self.get_tenant_database_name(tenant_id)
        await self.get_tenant_connection(database_name)
        return database_name

    async def drop_tenant_database(self, tenant_id: str) -> None:
        database_name = self.get_tenant_database_name(tenant_id)
        handle = await self.get_tenant_connection(database_name)

        async with handle.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.drop_all, tables=TENANT_TABLES)

        self._handles.pop(database_name, None)
        await handle.engine.dispose()
        await self._remove_database(database_name)
        logger.info("Dropped tenant database %s", database_name)

    async def shutdown(self) -> None:
        handles = list(self._handles.values())
        self._handles.clear()
        for handle in handles:
            await handle.engine.dispose()
        if self._control_plane is not None:
            await self._control_plane.engine.dispose()
            self._control_plane = None
        logger.info("Closed %d tenant connections and the control plane", len(handles))

    # ── Internals ─────────────────────────────────────────────

    @property
    def _is_sqlite(self) -> bool:
        return self._base_url.get_backend_name() == "sqlite"

    @property
    def _sqlite_dir(self) -> Path:
        database = self._base_url.database
        if not database or database == ":memory:":
            return Path(".")
        return Path(database).parent

    def _tenant_url(self, database_name: str) -> URL:
        if self._is_sqlite:
            return self._base_url.set(database=str(self._tenant_path(database_name)))
        return self._base_url.set(database=database_name)

    def _create_engine(self, url: URL) -> AsyncEngine:
        if self._is_sqlite:
            return create_async_engine(url, echo=False)
        return create_async_engine(
            url,
            echo=False,
            pool_pre_ping=True,
            pool_size=self._settings.db_pool_size,
            max_overflow=self._settings.db_max_overflow,
        )

    async def _open_tenant(self, database_name: str) -> ConnectionHandle:
        try:
            await self._ensure_database(database_name)
            engine = self._create_engine(self._tenant_url(database_name))
            try:
                async with engine.begin() as conn:
                    await conn.run_sync(SQLModel.metadata.create_all, tables=TENANT_TABLES)
            except Exception:
                await engine.dispose()
                raise
            handle = ConnectionHandle(database_name, engine)
            self._handles[database_name] = handle
            logger.info("Opened tenant database %s", database_name)
            return handle
        finally:
            self._opening.pop(database_name, None)

    async def _ensure_database(self, database_name: str) -> None:
        """Create the physical database if the backend needs it up front."""
        if self._is_sqlite:
            # The file is created on first connect.
            self._sqlite_dir.mkdir(parents=True, exist_ok=True)
            return

        control_plane = await self.get_control_plane_connection()
        async with control_plane.engine.connect() as conn:
            conn = await conn.execution_options(isolation_level="AUTOCOMMIT")
            exists = await conn.scalar(
                text("SELECT 1 FROM pg_database WHERE datname = :name"),
                {"name": database_name},
            )
            if not exists:
                await conn.execute(text(f'CREATE DATABASE "{database_name}"'))
                logger.info("Provisioned tenant database %s", database_name)

    async def _remove_database(self, database_name: str) -> None:
        if self._is_sqlite:
            self._tenant_path(database_name).unlink(missing_ok=True)
            return

        control_plane = await self.get_control_plane_connection()
        async with control_plane.engine.connect() as conn:
            conn = await conn.execution_options(isolation_level="AUTOCOMMIT")
            await conn.execute(text(f'DROP DATABASE IF EXISTS "{database_name}" WITH (FORCE)'))

    def _tenant_path(self, database_name: str) -> Path:
        return self._sqlite_dir / f"{database_name}.db"
