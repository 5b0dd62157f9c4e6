import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

import asyncpg
import asyncpg.pool
from asyncpg.exceptions import TooManyConnectionsError
from asyncpg.pool import PoolConnectionProxy

from shoreline_server.config import shorelineconfig
from shoreline_server.exceptions import ServiceUnavailableException
from shoreline_server.logging import logger

if TYPE_CHECKING:
    Connection = PoolConnectionProxy[Any]
else:
    Connection = PoolConnectionProxy


#
# Context variable to store the current connection
#

_current_connection: ContextVar["PoolConnectionProxy | None"] = ContextVar(  # type: ignore[type-arg]
    "_current_connection", default=None
)


class Postgres:
    """Postgres database connection.

    Provides an interface for interacting with a Postgres database.
    """

    shutting_down: bool = False
    pool: asyncpg.pool.Pool | None = None  # type: ignore[type-arg]

    # Shorthand for asyncpg exceptions
    # so we when we need to catch them, we don't need to import them
    # from asyncpg over and over again

    ForeignKeyViolationError = asyncpg.exceptions.ForeignKeyViolationError
    UniqueViolationError = asyncpg.exceptions.UniqueViolationError
    PostgresError = asyncpg.exceptions.PostgresError
    InterfaceError = asyncpg.exceptions.InterfaceError

    #
    # Connection pool lifecycle
    #

    @classmethod
    async def connect(cls) -> None:
        """Create a PostgreSQL connection pool."""

        if cls.shutting_down:
            logger.warning("Unable to connect to Postgres while shutting down.")
            return
        cls.pool = await asyncpg.create_pool(
            shorelineconfig.postgres_url,
            min_size=2,
            max_size=shorelineconfig.postgres_pool_size,
            max_inactive_connection_lifetime=20,
        )

    @classmethod
    async def shutdown(cls) -> None:
        """Close the PostgreSQL connection pool."""
        if cls.pool is not None:
            try:
                await asyncio.wait_for(cls.pool.close(), timeout=5)
            except TimeoutError:
                logger.error("Timeout closing Postgres connection pool.")
                cls.pool.terminate()
            finally:
                cls.pool = None
                cls.shutting_down = True

    #
    # Get connection / transaction
    #

    @classmethod
    @asynccontextmanager
    async def acquire(
        cls,
        *,
        timeout: int | None = None,
    ) -> AsyncGenerator[Connection, None]:
        """Acquire a connection from the pool."""
        conn = _current_connection.get()
        if conn is not None:
            yield conn
            return

        if cls.pool is None:
            raise ServiceUnavailableException("Database is not connected")

        if timeout is None:
            timeout = shorelineconfig.postgres_pool_timeout

        try:
            connection_proxy = await cls.pool.acquire(timeout=timeout)
        except TimeoutError:
            raise ServiceUnavailableException("Database pool timeout")
        except TooManyConnectionsError:
            raise ServiceUnavailableException("Database pool is full")

        token = _current_connection.set(connection_proxy)

        try:
            yield connection_proxy
        finally:
            _current_connection.reset(token)
            await cls.pool.release(connection_proxy)

    @classmethod
    @asynccontextmanager
    async def transaction(
        cls,
        *,
        timeout: int | None = None,
    ) -> AsyncGenerator[Connection, None]:
        """Acquire a connection from the pool and start a transaction."""
        async with cls.acquire(timeout=timeout) as connection:
            if connection.is_in_transaction():
                yield connection
            else:
                async with connection.transaction():
                    with logger.contextualize(transaction_id=id(connection)):
                        yield connection

    #
    # Postgres query wrappers
    #

    @classmethod
    async def execute(cls, query: str, *args: Any, timeout: float = 60) -> str:
        """Execute a SQL query and return a status (e.g. 'INSERT 0 2')"""
        async with cls.acquire() as connection:
            return await connection.execute(query, *args, timeout=timeout)

    @classmethod
    async def executemany(cls, query: str, *args: Any, timeout: float = 60) -> None:
        """Execute a SQL query with multiple parameters."""
        async with cls.acquire() as connection:
            return await connection.executemany(query, *args, timeout=timeout)

    @classmethod
    async def fetch(cls, query: str, *args: Any, timeout: float = 60):
        """Run a query and return the results as a list of Record."""
        async with cls.acquire() as connection:
            return await connection.fetch(query, *args, timeout=timeout)

    @classmethod
    async def fetchrow(cls, query: str, *args: Any, timeout: float = 60):
        """Run a query and return the first row as a Record."""
        async with cls.acquire() as connection:
            return await connection.fetchrow(query, *args, timeout=timeout)

    @classmethod
    async def iterate(
        cls,
        query: str,
        *args: Any,
    ) -> AsyncGenerator[dict[str, Any], None]:
        """Run a query and return a generator yielding rows as dictionaries."""
        if cls.pool is None:
            raise ServiceUnavailableException("Database is not connected")

        # Do not use context manager here:
        # Never set() a ContextVar in a context that may yield to caller
        # and then try to reset() it as async context may change

        conn = await cls.pool.acquire()

        try:
            if not conn.is_in_transaction():
                async with conn.transaction():
                    statement = await conn.prepare(query)
                    async for record in statement.cursor(*args):
                        yield dict(record)
            else:
                statement = await conn.prepare(query)
                async for record in statement.cursor(*args):
                    yield dict(record)
        finally:
            await cls.pool.release(conn)
