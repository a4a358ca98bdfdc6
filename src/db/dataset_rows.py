"""Dataset-to-row conversion helpers.

Both the seed loader and the integration tests convert a parsed dataset payload (`companies` and
`jobs` lists, camelCase keys as served by the API) into row tuples matching the `companies` and
`jobs` tables. Keeping this conversion in one place prevents drift between the two.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Any


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


def _optional_decimal(value: Any) -> Decimal | None:
    return None if value is None else Decimal(str(value))


def iter_company_rows(companies: Sequence[dict[str, Any]]) -> Iterable[tuple[Any, ...]]:
    """Yield row tuples for inserting into the `companies` table."""

    for company in companies:
        yield (
            str(company["handle"]),
            str(company["name"]),
            _optional_int(company.get("numEmployees")),
            str(company.get("description", "")),
            company.get("logoUrl"),
        )


def iter_job_rows(jobs: Sequence[dict[str, Any]]) -> Iterable[tuple[Any, ...]]:
    """Yield row tuples for inserting into the `jobs` table (ids are assigned by Postgres)."""

    for job in jobs:
        yield (
            str(job["title"]),
            _optional_int(job.get("salary")),
            _optional_decimal(job.get("equity")),
            str(job["companyHandle"]),
        )
