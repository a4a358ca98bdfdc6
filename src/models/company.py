"""Company resource model.

All functions take an open psycopg `AsyncConnection` configured with `dict_row` (see
`src.db.pool.create_pool`) and return validated `Company` records.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from psycopg import AsyncConnection

from src.db.query import Row, fetch_all, fetch_one
from src.models.errors import AlreadyExistsError, NotFoundError, StorageError, ValidationError
from src.models.schema import Company, CompanyNew, FieldValue
from src.sql.builder import build_predicate, build_select, build_update, column_list
from src.sql.columns import COMPANY_COLUMN_ALIASES, COMPANY_COLUMNS, COMPANY_UPDATABLE
from src.sql.filters import COMPANY_FILTERS

logger = logging.getLogger(__name__)

_TABLE = "companies"
_RETURNING = column_list(COMPANY_COLUMNS)


def _to_company(row: Row) -> Company:
    return Company.model_validate(row)


async def create(conn: AsyncConnection, data: CompanyNew) -> Company:
    """Create a company and return it.

    Raises:
        AlreadyExistsError: If the handle (or name) is already taken, including when a concurrent
            create wins the race after the pre-check.
    """

    duplicate = await fetch_one(
        conn,
        "SELECT handle FROM companies WHERE handle = %s",
        (data.handle,),
    )
    if duplicate is not None:
        raise AlreadyExistsError(f"Duplicate company: {data.handle}")

    try:
        row = await fetch_one(
            conn,
            f"INSERT INTO companies (handle, name, description, num_employees, logo_url) "
            f"VALUES (%s, %s, %s, %s, %s) RETURNING {_RETURNING}",
            (data.handle, data.name, data.description, data.num_employees, data.logo_url),
        )
    except AlreadyExistsError as exc:
        raise AlreadyExistsError(f"Duplicate company: {data.handle}") from exc

    if row is None:
        raise StorageError("INSERT returned no row")
    logger.info("company created handle=%s", data.handle)
    return _to_company(row)


async def find_all(conn: AsyncConnection) -> list[Company]:
    """Return every company ordered by name."""

    query = build_select(_TABLE, COMPANY_COLUMNS, order_by="name")
    rows = await fetch_all(conn, query.sql, query.params)
    return [_to_company(r) for r in rows]


async def get(conn: AsyncConnection, handle: str) -> Company:
    """Return the company with the given handle.

    Raises:
        NotFoundError: If there is no such company.
    """

    row = await fetch_one(
        conn,
        f"SELECT {_RETURNING} FROM companies WHERE handle = %s",
        (handle,),
    )
    if row is None:
        raise NotFoundError(f"No company: {handle}")
    return _to_company(row)


async def find_filtered(conn: AsyncConnection, filters: Mapping[str, FieldValue]) -> list[Company]:
    """Return companies matching `filters` (`name`, `minEmployees`, `maxEmployees`)."""

    predicate = build_predicate(filters, COMPANY_FILTERS)
    logger.debug("company search where=%s params=%s", predicate.sql, predicate.params)

    query = build_select(_TABLE, COMPANY_COLUMNS, order_by="name", predicate=predicate)
    rows = await fetch_all(conn, query.sql, query.params)
    return [_to_company(r) for r in rows]


async def search(conn: AsyncConnection, filters: Mapping[str, FieldValue]) -> list[Company]:
    """List companies, filtered only when the caller supplied at least one filter."""

    if not filters:
        return await find_all(conn)
    return await find_filtered(conn, filters)


async def update(conn: AsyncConnection, handle: str, fields: Mapping[str, FieldValue]) -> Company:
    """Partially update a company; only the supplied fields change.

    `fields` may include `name`, `description`, `numEmployees` and `logoUrl`.

    Raises:
        ValidationError: If `fields` is empty or names a field that cannot be updated.
        NotFoundError: If there is no such company.
    """

    disallowed = sorted(set(fields) - COMPANY_UPDATABLE)
    if disallowed:
        raise ValidationError(f"Cannot update company fields: {', '.join(disallowed)}")

    query = build_update(
        _TABLE,
        key_column="handle",
        key=handle,
        fields=fields,
        aliases=COMPANY_COLUMN_ALIASES,
        returning=COMPANY_COLUMNS,
    )
    row = await fetch_one(conn, query.sql, query.params)
    if row is None:
        raise NotFoundError(f"No company: {handle}")

    logger.info("company updated handle=%s fields=%s", handle, sorted(fields))
    return _to_company(row)


async def remove(conn: AsyncConnection, handle: str) -> None:
    """Delete a company (and, by cascade, its jobs).

    Raises:
        NotFoundError: If there is no such company.
    """

    row = await fetch_one(
        conn,
        "DELETE FROM companies WHERE handle = %s RETURNING handle",
        (handle,),
    )
    if row is None:
        raise NotFoundError(f"No company: {handle}")
    logger.info("company removed handle=%s", handle)
