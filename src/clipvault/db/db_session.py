"""Process-wide connection cache for the metadata store.

The first call to :meth:`ConnectionCache.connect` starts establishing the
async engine; concurrent callers await the same pending attempt, so at most
one connection handshake is ever in flight. A failed attempt is forgotten so
that the next call may retry.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from functools import partial
from typing import AsyncIterator, Awaitable, Callable

import structlog
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ..exceptions import ConfigurationError, DatabaseConnectionError, handle_sqlalchemy_errors
from .db_models import Base

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class Connection:
    """Established engine plus the session factory bound to it."""

    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]


Connector = Callable[[str], Awaitable[Connection]]


def _engine_options(dsn: str) -> dict[str, object]:
    url = make_url(dsn)
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        # every pooled connection would otherwise see its own empty database
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


async def open_connection(dsn: str, *, create_schema: bool = True) -> Connection:
    """Create the async engine, verify it with a round trip and build sessions."""

    engine = create_async_engine(dsn, future=True, **_engine_options(dsn))
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if create_schema:
                await conn.run_sync(Base.metadata.create_all)
    except Exception:
        await engine.dispose()
        raise
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return Connection(engine=engine, session_factory=session_factory)


class ConnectionCache:
    """Lazily established, memoised connection shared by all handlers."""

    def __init__(
        self,
        dsn: str | None,
        *,
        connector: Connector | None = None,
        create_schema: bool = True,
    ) -> None:
        self._dsn = dsn
        self._connector = connector or partial(open_connection, create_schema=create_schema)
        self._connection: Connection | None = None
        self._pending: asyncio.Future[Connection] | None = None
        self.attempts = 0

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    async def connect(self) -> Connection:
        """Return the shared connection, establishing it on first demand."""

        if self._connection is not None:
            logger.debug("db.connect.reuse")
            return self._connection
        if not self._dsn:
            logger.error("db.connect.misconfigured", setting="CLIPVAULT_DATABASE_URL")
            raise ConfigurationError("CLIPVAULT_DATABASE_URL is not configured")
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._establish(self._dsn))
        else:
            logger.debug("db.connect.await_pending")
        # shield: a cancelled request must not abort the attempt other callers share
        return await asyncio.shield(self._pending)

    async def _establish(self, dsn: str) -> Connection:
        self.attempts += 1
        logger.info("db.connect.start", attempt=self.attempts)
        try:
            connection = await self._connector(dsn)
        except Exception as exc:
            self._pending = None
            logger.error("db.connect.failed", attempt=self.attempts, error=str(exc))
            raise DatabaseConnectionError(f"Database connection failed: {exc}") from exc
        self._connection = connection
        self._pending = None
        logger.info("db.connect.ready", attempt=self.attempts)
        return connection

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session bound to the shared connection."""

        connection = await self.connect()
        async with connection.session_factory() as session:
            yield session

    async def ping(self) -> bool:
        """Run ``SELECT 1`` against the store; used by the health probe."""

        connection = await self.connect()
        async with handle_sqlalchemy_errors(entity="health"):
            async with connection.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        return True

    async def dispose(self) -> None:
        """Release the engine at application shutdown."""

        connection, self._connection = self._connection, None
        if connection is not None:
            await connection.engine.dispose()
            logger.info("db.connect.disposed")


__all__ = ["Connection", "ConnectionCache", "Connector", "open_connection"]
