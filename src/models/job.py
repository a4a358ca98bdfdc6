"""Job resource model."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from psycopg import AsyncConnection

from src.db.query import Row, fetch_all, fetch_one
from src.models.errors import AlreadyExistsError, NotFoundError, StorageError, ValidationError
from src.models.schema import FieldValue, Job, JobNew
from src.sql.builder import build_predicate, build_select, build_update, column_list
from src.sql.columns import JOB_COLUMN_ALIASES, JOB_COLUMNS, JOB_UPDATABLE
from src.sql.filters import JOB_FILTERS

logger = logging.getLogger(__name__)

_TABLE = "jobs"
_RETURNING = column_list(JOB_COLUMNS)


def _to_job(row: Row) -> Job:
    return Job.model_validate(row)


async def create(conn: AsyncConnection, data: JobNew) -> Job:
    """Create a job and return it.

    Raises:
        AlreadyExistsError: If the company already has a job with this title.
        ValidationError: If the company does not exist.
    """

    duplicate = await fetch_one(
        conn,
        "SELECT id FROM jobs WHERE title = %s AND company_handle = %s",
        (data.title, data.company_handle),
    )
    if duplicate is not None:
        raise AlreadyExistsError(f"Job already exists: {data.title} with {data.company_handle}")

    try:
        row = await fetch_one(
            conn,
            f"INSERT INTO jobs (title, salary, equity, company_handle) "
            f"VALUES (%s, %s, %s, %s) RETURNING {_RETURNING}",
            (data.title, data.salary, data.equity, data.company_handle),
        )
    except AlreadyExistsError as exc:
        raise AlreadyExistsError(
            f"Job already exists: {data.title} with {data.company_handle}"
        ) from exc

    if row is None:
        raise StorageError("INSERT returned no row")
    job = _to_job(row)
    logger.info("job created id=%d company=%s", job.id, job.company_handle)
    return job


async def find_all(conn: AsyncConnection) -> list[Job]:
    """Return every job ordered by id."""

    query = build_select(_TABLE, JOB_COLUMNS, order_by="id")
    rows = await fetch_all(conn, query.sql, query.params)
    return [_to_job(r) for r in rows]


async def get(conn: AsyncConnection, job_id: int) -> Job:
    """Return the job with the given id.

    Raises:
        NotFoundError: If there is no such job.
    """

    row = await fetch_one(conn, f"SELECT {_RETURNING} FROM jobs WHERE id = %s", (job_id,))
    if row is None:
        raise NotFoundError(f"No job: {job_id}")
    return _to_job(row)


async def find_by_company(conn: AsyncConnection, handle: str) -> list[Job]:
    """Return the jobs posted by a company, ordered by id.

    Raises:
        NotFoundError: If there is no such company.
    """

    company = await fetch_one(conn, "SELECT handle FROM companies WHERE handle = %s", (handle,))
    if company is None:
        raise NotFoundError(f"No company: {handle}")

    rows = await fetch_all(
        conn,
        f"SELECT {_RETURNING} FROM jobs WHERE company_handle = %s ORDER BY id",
        (handle,),
    )
    return [_to_job(r) for r in rows]


async def find_filtered(conn: AsyncConnection, filters: Mapping[str, FieldValue]) -> list[Job]:
    """Return jobs matching `filters` (`title`, `minSalary`, `hasEquity`)."""

    predicate = build_predicate(filters, JOB_FILTERS)
    logger.debug("job search where=%s params=%s", predicate.sql, predicate.params)

    query = build_select(_TABLE, JOB_COLUMNS, order_by="id", predicate=predicate)
    rows = await fetch_all(conn, query.sql, query.params)
    return [_to_job(r) for r in rows]


async def search(conn: AsyncConnection, filters: Mapping[str, FieldValue]) -> list[Job]:
    """List jobs, filtered only when the caller supplied at least one filter."""

    if not filters:
        return await find_all(conn)
    return await find_filtered(conn, filters)


async def update(conn: AsyncConnection, job_id: int, fields: Mapping[str, FieldValue]) -> Job:
    """Partially update a job. `fields` may include `title`, `salary` and `equity`.

    Raises:
        ValidationError: If `fields` is empty or names a field that cannot be updated.
        NotFoundError: If there is no such job.
    """

    disallowed = sorted(set(fields) - JOB_UPDATABLE)
    if disallowed:
        raise ValidationError(f"Cannot update job fields: {', '.join(disallowed)}")

    query = build_update(
        _TABLE,
        key_column="id",
        key=job_id,
        fields=fields,
        aliases=JOB_COLUMN_ALIASES,
        returning=JOB_COLUMNS,
    )
    row = await fetch_one(conn, query.sql, query.params)
    if row is None:
        raise NotFoundError(f"No job: {job_id}")

    logger.info("job updated id=%s fields=%s", job_id, sorted(fields))
    return _to_job(row)


async def remove(conn: AsyncConnection, job_id: int) -> None:
    """Delete a job.

    Raises:
        NotFoundError: If there is no such job.
    """

    row = await fetch_one(conn, "DELETE FROM jobs WHERE id = %s RETURNING id", (job_id,))
    if row is None:
        raise NotFoundError(f"No job: {job_id}")
    logger.info("job removed id=%s", job_id)
