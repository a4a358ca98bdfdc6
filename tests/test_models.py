"""Tests for the company/job resource models against a recording fake connection.

The fake stands in for a psycopg `AsyncConnection` configured with `dict_row`: each `execute` pops the
next scripted outcome (a list of rows, or an exception to raise).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import psycopg
import pytest
from psycopg import errors

from src.models import company, job
from src.models.errors import AlreadyExistsError, NotFoundError, StorageError, ValidationError
from src.models.schema import CompanyNew, JobNew

C1_ROW = {
    "handle": "c1",
    "name": "C1",
    "description": "Desc1",
    "num_employees": 1,
    "logo_url": "http://c1.img",
}

J1_ROW = {
    "id": 1,
    "title": "J1",
    "salary": 100,
    "equity": Decimal("0.1"),
    "company_handle": "c1",
}


class _FakeCursor:
    def __init__(self, conn: _FakeConnection) -> None:
        self._conn = conn
        self._rows: list[dict[str, Any]] = []

    async def __aenter__(self) -> _FakeCursor:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        return None

    async def execute(self, sql: str, params: tuple[Any, ...] = ()) -> None:
        """Record the statement and load the next scripted outcome."""
        self._conn.executed.append((sql, params))
        outcome = self._conn.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        self._rows = outcome

    async def fetchone(self) -> dict[str, Any] | None:
        return self._rows[0] if self._rows else None

    async def fetchall(self) -> list[dict[str, Any]]:
        return list(self._rows)


class _FakeConnection:
    def __init__(self, *outcomes: Any) -> None:
        self.outcomes = list(outcomes)
        self.executed: list[tuple[str, tuple[Any, ...]]] = []

    def cursor(self) -> _FakeCursor:
        return _FakeCursor(self)


def _new_company() -> CompanyNew:
    return CompanyNew(
        handle="c1",
        name="C1",
        description="Desc1",
        numEmployees=1,
        logoUrl="http://c1.img",
    )


@pytest.mark.asyncio
async def test_company_create_inserts_after_pre_check() -> None:
    conn = _FakeConnection([], [C1_ROW])

    created = await company.create(conn, _new_company())  # type: ignore[arg-type]

    assert created.handle == "c1"
    assert created.num_employees == 1
    assert created.model_dump(by_alias=True)["logoUrl"] == "http://c1.img"
    insert_sql, insert_params = conn.executed[1]
    assert insert_sql.startswith("INSERT INTO companies")
    assert insert_params == ("c1", "C1", "Desc1", 1, "http://c1.img")


@pytest.mark.asyncio
async def test_company_create_duplicate_pre_check() -> None:
    conn = _FakeConnection([{"handle": "c1"}])

    with pytest.raises(AlreadyExistsError, match="Duplicate company: c1"):
        await company.create(conn, _new_company())  # type: ignore[arg-type]

    assert len(conn.executed) == 1


@pytest.mark.asyncio
async def test_company_create_unique_violation_race() -> None:
    conn = _FakeConnection([], errors.UniqueViolation("duplicate key value"))

    with pytest.raises(AlreadyExistsError, match="Duplicate company: c1"):
        await company.create(conn, _new_company())  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_company_get_not_found() -> None:
    conn = _FakeConnection([])

    with pytest.raises(NotFoundError, match="No company: nope"):
        await company.get(conn, "nope")  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_company_update_builds_partial_update() -> None:
    conn = _FakeConnection([{**C1_ROW, "num_employees": 20}])

    updated = await company.update(conn, "c1", {"numEmployees": 20})  # type: ignore[arg-type]

    assert updated.num_employees == 20
    sql, params = conn.executed[0]
    assert 'SET "num_employees"=%s WHERE "handle" = %s' in sql
    assert params == (20, "c1")


@pytest.mark.asyncio
async def test_company_update_passes_null_through() -> None:
    conn = _FakeConnection([{**C1_ROW, "logo_url": None}])

    updated = await company.update(conn, "c1", {"logoUrl": None})  # type: ignore[arg-type]

    assert updated.logo_url is None
    assert conn.executed[0][1] == (None, "c1")


@pytest.mark.asyncio
async def test_company_update_not_found() -> None:
    conn = _FakeConnection([])

    with pytest.raises(NotFoundError):
        await company.update(conn, "nope", {"name": "X"})  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_company_update_rejects_empty_and_immutable_fields() -> None:
    conn = _FakeConnection()

    with pytest.raises(ValidationError, match="No data"):
        await company.update(conn, "c1", {})  # type: ignore[arg-type]
    with pytest.raises(ValidationError, match="handle"):
        await company.update(conn, "c1", {"handle": "c9"})  # type: ignore[arg-type]

    assert conn.executed == []


@pytest.mark.asyncio
async def test_company_search_dispatches_on_empty_filter() -> None:
    conn = _FakeConnection([C1_ROW], [C1_ROW])

    await company.search(conn, {})  # type: ignore[arg-type]
    await company.search(conn, {"name": "C"})  # type: ignore[arg-type]

    all_sql, all_params = conn.executed[0]
    assert "WHERE" not in all_sql
    assert all_params == ()
    filtered_sql, filtered_params = conn.executed[1]
    assert "WHERE LOWER(companies.name) LIKE LOWER(%s)" in filtered_sql
    assert filtered_params == ("%C%",)


@pytest.mark.asyncio
async def test_company_filter_validation_happens_before_query() -> None:
    conn = _FakeConnection()

    with pytest.raises(ValidationError):
        await company.find_filtered(conn, {"minEmployees": 50, "maxEmployees": 10})  # type: ignore[arg-type]

    assert conn.executed == []


@pytest.mark.asyncio
async def test_company_remove_not_found() -> None:
    conn = _FakeConnection([])

    with pytest.raises(NotFoundError):
        await company.remove(conn, "nope")  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_storage_failure_surfaces_as_storage_error() -> None:
    conn = _FakeConnection(psycopg.OperationalError("connection lost"))

    with pytest.raises(StorageError, match="connection lost"):
        await company.find_all(conn)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_job_create_duplicate_pre_check() -> None:
    conn = _FakeConnection([{"id": 1}])

    with pytest.raises(AlreadyExistsError, match="J1 with c1"):
        await job.create(conn, JobNew(title="J1", salary=100, companyHandle="c1"))  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_job_create_unknown_company_is_validation_error() -> None:
    conn = _FakeConnection([], errors.ForeignKeyViolation("violates foreign key constraint"))

    with pytest.raises(ValidationError):
        await job.create(conn, JobNew(title="J1", companyHandle="wrong"))  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_job_create_returns_record() -> None:
    conn = _FakeConnection([], [J1_ROW])

    created = await job.create(  # type: ignore[arg-type]
        conn,
        JobNew(title="J1", salary=100, equity=Decimal("0.1"), companyHandle="c1"),
    )

    assert created.id == 1
    assert created.model_dump(by_alias=True)["companyHandle"] == "c1"
    assert conn.executed[1][1] == ("J1", 100, Decimal("0.1"), "c1")


@pytest.mark.asyncio
async def test_job_update_uses_job_columns() -> None:
    conn = _FakeConnection([{**J1_ROW, "title": "X"}])

    updated = await job.update(conn, 1, {"title": "X", "salary": None})  # type: ignore[arg-type]

    assert updated.title == "X"
    sql, params = conn.executed[0]
    assert 'UPDATE jobs SET "title"=%s, "salary"=%s WHERE "id" = %s' in sql
    assert params == ("X", None, 1)


@pytest.mark.asyncio
async def test_job_update_rejects_company_handle() -> None:
    conn = _FakeConnection()

    with pytest.raises(ValidationError, match="companyHandle"):
        await job.update(conn, 1, {"companyHandle": "c2"})  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_job_find_filtered_with_equity_flag() -> None:
    conn = _FakeConnection([J1_ROW])

    jobs = await job.find_filtered(conn, {"hasEquity": True, "minSalary": 50})  # type: ignore[arg-type]

    assert [j.id for j in jobs] == [1]
    sql, params = conn.executed[0]
    assert "WHERE jobs.salary >= %s AND jobs.equity > 0" in sql
    assert params == (50,)


@pytest.mark.asyncio
async def test_job_find_by_company_requires_company() -> None:
    conn = _FakeConnection([])

    with pytest.raises(NotFoundError, match="No company: nope"):
        await job.find_by_company(conn, "nope")  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_job_get_and_remove_not_found() -> None:
    conn = _FakeConnection([], [])

    with pytest.raises(NotFoundError):
        await job.get(conn, 999)  # type: ignore[arg-type]
    with pytest.raises(NotFoundError):
        await job.remove(conn, 999)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_company_create_without_returned_row_is_storage_error() -> None:
    conn = _FakeConnection([], [])

    with pytest.raises(StorageError, match="no row"):
        await company.create(conn, _new_company())  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_job_create_without_returned_row_is_storage_error() -> None:
    conn = _FakeConnection([], [])

    with pytest.raises(StorageError, match="no row"):
        await job.create(conn, JobNew(title="J1", companyHandle="c1"))  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_records_are_returned_as_stored() -> None:
    conn = _FakeConnection([{**C1_ROW, "name": " C1 ", "description": "Desc1\n"}])

    fetched = await company.get(conn, "c1")  # type: ignore[arg-type]

    assert fetched.name == " C1 "
    assert fetched.description == "Desc1\n"


def test_new_records_strip_whitespace() -> None:
    data = CompanyNew(handle=" c1 ", name=" C1 ", description=" D ")

    assert (data.handle, data.name, data.description) == ("c1", "C1", "D")
