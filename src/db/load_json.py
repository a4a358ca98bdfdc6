"""Load a companies/jobs JSON dataset into Postgres.

The dataset is expected to be a JSON object with a `"companies"` list and an optional `"jobs"` list,
using the same camelCase field names the API serves (`numEmployees`, `logoUrl`, `companyHandle`).
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any
from urllib.request import urlopen

from dotenv import load_dotenv

from src.config.logging import configure_logging
from src.db.connection import connect, require_database_url
from src.db.dataset_rows import iter_company_rows, iter_job_rows

logger = logging.getLogger(__name__)

INSERT_COMPANY_SQL = """
    INSERT INTO companies (handle, name, num_employees, description, logo_url)
    VALUES (%s, %s, %s, %s, %s) ON CONFLICT (handle) DO
    UPDATE SET
        name = EXCLUDED.name,
        num_employees = EXCLUDED.num_employees,
        description = EXCLUDED.description,
        logo_url = EXCLUDED.logo_url
"""

INSERT_JOB_SQL = """
    INSERT INTO jobs (title, salary, equity, company_handle)
    VALUES (%s, %s, %s, %s) ON CONFLICT (title, company_handle) DO
    UPDATE SET
        salary = EXCLUDED.salary,
        equity = EXCLUDED.equity
"""


def _load_json_bytes(*, path: str | None, url: str | None) -> bytes:
    if bool(path) == bool(url):
        raise ValueError("Exactly one of --path or --url must be provided")

    if path:
        return Path(path).read_bytes()

    assert url is not None
    with urlopen(url) as resp:  # noqa: S310 (controlled URL from CLI)
        return resp.read()


def parse_dataset(payload: Any) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Validate the dataset shape and return `(companies, jobs)`."""

    if (
            not isinstance(payload, dict)
            or not isinstance(payload.get("companies"), list)
            or not isinstance(payload.get("jobs", []), list)
    ):
        raise ValueError(
            "Unexpected dataset format: expected object with a 'companies' list "
            "and an optional 'jobs' list"
        )
    return payload["companies"], payload.get("jobs", [])


def load_dataset(*, path: str | None, url: str | None, truncate: bool) -> None:
    """Load the dataset into the `companies` and `jobs` tables."""

    load_dotenv(".env")
    database_url = require_database_url()

    payload = json.loads(_load_json_bytes(path=path, url=url))
    companies, jobs = parse_dataset(payload)

    with connect(database_url) as conn:
        with conn.transaction():
            with conn.cursor() as cur:
                if truncate:
                    cur.execute("TRUNCATE jobs, companies RESTART IDENTITY", prepare=False)

                cur.executemany(INSERT_COMPANY_SQL, list(iter_company_rows(companies)))
                cur.executemany(INSERT_JOB_SQL, list(iter_job_rows(jobs)))

    logger.info("loaded companies=%d jobs=%d", len(companies), len(jobs))


def main() -> None:
    """CLI entry point for loading the dataset into Postgres."""

    parser = argparse.ArgumentParser(description="Load a companies/jobs dataset into Postgres.")
    src = parser.add_mutually_exclusive_group(required=True)
    src.add_argument("--path", help="Path to the dataset JSON file.")
    src.add_argument("--url", help="URL to download the dataset JSON.")
    parser.add_argument(
        "--truncate",
        action="store_true",
        help="TRUNCATE target tables before loading (destructive).",
    )
    args = parser.parse_args()

    configure_logging()
    load_dataset(path=args.path, url=args.url, truncate=args.truncate)


if __name__ == "__main__":
    main()
