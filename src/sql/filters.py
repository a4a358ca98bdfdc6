"""Search filter schemas.

A `FilterSchema` is the allowlist of query keys a resource accepts. For every key it declares the
column expression, the comparison operator and how the supplied value is interpreted. Clauses are
emitted in the declared field order, never in the order the caller's mapping happens to iterate.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class FilterKind(StrEnum):
    """How a filter value is interpreted."""

    text = "text"
    numeric = "numeric"
    flag = "flag"


@dataclass(frozen=True)
class FilterField:
    """A single recognized filter key.

    For `text` and `numeric` kinds the clause is `<column> <operator> %s`. For `flag` the whole clause
    is `<column> <operator>` with no bound value, and it is only emitted when the flag is truthy.
    """

    key: str
    column: str
    kind: FilterKind
    operator: str


@dataclass(frozen=True)
class FilterSchema:
    """Ordered allowlist of filter fields plus min/max pairs validated together."""

    fields: tuple[FilterField, ...]
    ranges: tuple[tuple[str, str], ...] = ()

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(f.key for f in self.fields)


COMPANY_FILTERS = FilterSchema(
    fields=(
        FilterField("name", "LOWER(companies.name)", FilterKind.text, "LIKE"),
        FilterField("minEmployees", "companies.num_employees", FilterKind.numeric, ">"),
        FilterField("maxEmployees", "companies.num_employees", FilterKind.numeric, "<"),
    ),
    ranges=(("minEmployees", "maxEmployees"),),
)

JOB_FILTERS = FilterSchema(
    fields=(
        FilterField("title", "LOWER(jobs.title)", FilterKind.text, "LIKE"),
        FilterField("minSalary", "jobs.salary", FilterKind.numeric, ">="),
        FilterField("hasEquity", "jobs.equity", FilterKind.flag, "> 0"),
    ),
)
