from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager, nullcontext
from typing import Any, AsyncGenerator, Optional

import sqlalchemy as sa
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


class SerializedAsyncSession(AsyncSession):
    """
    AsyncSession for an engine with a single shared connection.

    Holds the engine gate from `async with` entry until `close()`, so two
    sessions never interleave their transactions on that connection.
    """

    def __init__(self, *args: Any, gate: asyncio.Lock, **kw: Any) -> None:
        super().__init__(*args, **kw)
        self._gate = gate
        self._holds_gate = False

    async def __aenter__(self) -> "SerializedAsyncSession":
        await self._gate.acquire()
        self._holds_gate = True
        return await super().__aenter__()

    async def close(self) -> None:
        try:
            await super().close()
        finally:
            if self._holds_gate:
                self._holds_gate = False
                self._gate.release()


class Database:
    """
    Owns one AsyncEngine and its session factory.

    Constructed explicitly at startup (or per test) and handed to whatever
    needs sessions; there is no module-level engine.
    """

    def __init__(self, database_url: str, *, echo: bool = False) -> None:
        self.url = database_url
        url = make_url(database_url)
        engine_kwargs: dict = {"echo": echo}
        # set for single-connection engines; every session takes it in turn
        self.gate: Optional[asyncio.Lock] = None

        if url.get_backend_name() == "sqlite":
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if url.database in (None, "", ":memory:"):
                # one shared connection, otherwise every session sees an empty db
                engine_kwargs["poolclass"] = StaticPool
                self.gate = asyncio.Lock()
        else:
            engine_kwargs.update(
                pool_size=5,
                max_overflow=10,
                pool_timeout=30,
                pool_recycle=3600,
                pool_pre_ping=True,
            )

        self.engine: AsyncEngine = create_async_engine(database_url, **engine_kwargs)
        session_kwargs: dict = {}
        if self.gate is not None:
            session_kwargs.update(class_=SerializedAsyncSession, gate=self.gate)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            expire_on_commit=False,
            autoflush=True,
            **session_kwargs,
        )

    def _exclusive(self):
        """Raw connection use outside a session also waits for the gate."""
        return self.gate if self.gate is not None else nullcontext()

    @property
    def is_sqlite(self) -> bool:
        return self.engine.dialect.name == "sqlite"

    async def create_all(self) -> None:
        """Create every mapped table (dev/test only; production uses alembic)."""
        from src.shared.infrastructure.database.base_model import Base
        # register mappers
        import src.scheduling.infrastructure.models  # noqa: F401
        import src.notifications.infrastructure.models  # noqa: F401
        import src.audit.infrastructure.models  # noqa: F401

        async with self._exclusive(), self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_tables_created", backend=self.engine.dialect.name)

    async def ping(self) -> None:
        async with self._exclusive(), self.engine.connect() as conn:
            await conn.execute(sa.text("SELECT 1"))

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("database_engine_disposed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Plain session; the caller owns the transaction."""
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
