"""Safe DB query helpers.

These helpers never interpolate values into SQL; every value is passed through `params`. Storage
errors are translated into model errors and re-raised, never swallowed.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, LiteralString, cast

import psycopg
from psycopg import AsyncConnection, errors

from src.models.errors import AlreadyExistsError, StorageError, ValidationError

Row = dict[str, Any]


def _detail(exc: psycopg.Error) -> str:
    diag = exc.diag
    return diag.message_detail or diag.message_primary or str(exc)


@contextmanager
def storage_errors() -> Iterator[None]:
    """Translate psycopg errors raised inside the block into model errors.

    - `UniqueViolation` -> `AlreadyExistsError`
    - foreign key / check / not-null violations -> `ValidationError`
    - anything else from psycopg -> `StorageError`
    """

    try:
        yield
    except errors.UniqueViolation as exc:
        raise AlreadyExistsError(_detail(exc)) from exc
    except (errors.ForeignKeyViolation, errors.CheckViolation, errors.NotNullViolation) as exc:
        raise ValidationError(_detail(exc)) from exc
    except psycopg.Error as exc:
        raise StorageError(str(exc)) from exc


async def fetch_all(conn: AsyncConnection, sql: str, params: tuple[Any, ...] = ()) -> list[Row]:
    """Execute a query and return every row."""

    with storage_errors():
        async with conn.cursor() as cur:
            await cur.execute(cast(LiteralString, sql), params)
            return list(await cur.fetchall())


async def fetch_one(conn: AsyncConnection, sql: str, params: tuple[Any, ...] = ()) -> Row | None:
    """Execute a query and return the first row, or `None` when there is none."""

    with storage_errors():
        async with conn.cursor() as cur:
            await cur.execute(cast(LiteralString, sql), params)
            return await cur.fetchone()
