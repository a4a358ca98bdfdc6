"""Allowlisted SQL identifiers.

All column names referenced in generated SQL must come from these mappings; no caller-provided
identifier should ever be interpolated into SQL.
"""

from __future__ import annotations

# API field name -> storage column, only where the two differ.
COMPANY_COLUMN_ALIASES: dict[str, str] = {
    "numEmployees": "num_employees",
    "logoUrl": "logo_url",
}

JOB_COLUMN_ALIASES: dict[str, str] = {
    "companyHandle": "company_handle",
}

COMPANY_UPDATABLE: frozenset[str] = frozenset({"name", "description", "numEmployees", "logoUrl"})

JOB_UPDATABLE: frozenset[str] = frozenset({"title", "salary", "equity"})

COMPANY_COLUMNS: tuple[str, ...] = ("handle", "name", "description", "num_employees", "logo_url")

JOB_COLUMNS: tuple[str, ...] = ("id", "title", "salary", "equity", "company_handle")
