import asyncio

import pytest
from sqlalchemy import inspect

from src.clipvault.db.db_session import Connection, ConnectionCache, open_connection
from src.clipvault.exceptions import ConfigurationError, DatabaseConnectionError
from tests.helpers.identity import MEMORY_DSN


class CountingConnector:
    def __init__(self, *, failures: int = 0, delay: float = 0.01) -> None:
        self.calls = 0
        self.failures = failures
        self.delay = delay
        self.connection = Connection(engine=object(), session_factory=object())  # type: ignore[arg-type]

    async def __call__(self, dsn: str) -> Connection:
        self.calls += 1
        await asyncio.sleep(self.delay)
        if self.calls <= self.failures:
            raise OSError("connection refused")
        return self.connection


@pytest.mark.asyncio
async def test_concurrent_first_connects_share_one_attempt() -> None:
    connector = CountingConnector()
    cache = ConnectionCache("postgresql+psycopg://db/videos", connector=connector)

    results = await asyncio.gather(*(cache.connect() for _ in range(10)))

    assert connector.calls == 1
    assert cache.attempts == 1
    assert all(result is connector.connection for result in results)


@pytest.mark.asyncio
async def test_established_connection_is_reused_without_revalidation() -> None:
    connector = CountingConnector()
    cache = ConnectionCache("postgresql+psycopg://db/videos", connector=connector)

    first = await cache.connect()
    second = await cache.connect()

    assert first is second
    assert connector.calls == 1
    assert cache.is_connected


@pytest.mark.asyncio
async def test_missing_dsn_fails_fast_without_connecting() -> None:
    connector = CountingConnector()
    cache = ConnectionCache(None, connector=connector)

    with pytest.raises(ConfigurationError):
        await cache.connect()

    assert connector.calls == 0


@pytest.mark.asyncio
async def test_failed_attempt_is_cleared_so_next_call_retries() -> None:
    connector = CountingConnector(failures=1)
    cache = ConnectionCache("postgresql+psycopg://db/videos", connector=connector)

    with pytest.raises(DatabaseConnectionError):
        await cache.connect()
    assert not cache.is_connected

    connection = await cache.connect()

    assert connection is connector.connection
    assert connector.calls == 2


@pytest.mark.asyncio
async def test_concurrent_waiters_all_observe_the_same_failure() -> None:
    connector = CountingConnector(failures=1)
    cache = ConnectionCache("postgresql+psycopg://db/videos", connector=connector)

    results = await asyncio.gather(
        *(cache.connect() for _ in range(5)), return_exceptions=True
    )

    assert connector.calls == 1
    assert all(isinstance(result, DatabaseConnectionError) for result in results)


@pytest.mark.asyncio
async def test_open_connection_creates_schema_and_answers_ping() -> None:
    cache = ConnectionCache(MEMORY_DSN, connector=open_connection)

    connection = await cache.connect()
    try:
        assert await cache.ping() is True
        async with connection.engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        assert "videos" in tables
    finally:
        await cache.dispose()

    assert not cache.is_connected
