"""Async Postgres connection pool.

The resource models run on an async pool (psycopg3). Connections are in autocommit mode, so each
statement is its own transaction, and rows come back as dicts keyed by column name.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from dotenv import load_dotenv
from psycopg import AsyncConnection
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from src.db.connection import require_database_url


def create_pool(
        database_url: str | None = None,
        *,
        min_size: int = 1,
        max_size: int | None = None,
        timeout: float = 30.0,
) -> AsyncConnectionPool:
    """Create an async DB pool.

    Notes:
        - The returned pool is created with `open=False`. Call `await pool.open()` at startup.
        - If `database_url` is omitted, the function loads `.env` and reads `DATABASE_URL`.
    """

    if database_url is None:
        load_dotenv(".env")
        database_url = require_database_url()

    return AsyncConnectionPool(
        conninfo=database_url,
        min_size=min_size,
        max_size=max_size,
        timeout=timeout,
        open=False,
        kwargs={"autocommit": True, "row_factory": dict_row},
    )


@asynccontextmanager
async def get_conn(pool: AsyncConnectionPool) -> AsyncIterator[AsyncConnection[dict[str, Any]]]:
    """Acquire a connection from the pool."""

    async with pool.connection() as conn:
        yield conn
