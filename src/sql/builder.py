"""Deterministic SQL builder.

Search filters are turned into a parameterized predicate driven by a `FilterSchema`; updates reuse
the partial-update SET builder. Identifiers (tables, columns, operators) are strictly allowlisted;
only values become bound parameters.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from src.models.errors import ValidationError
from src.models.schema import FieldValue
from src.sql.filters import FilterField, FilterKind, FilterSchema
from src.sql.update import build_set_clause, quote_ident

TRUE_PREDICATE = "TRUE"

_FLAG_TRUE = frozenset({"true", "1", "yes"})
_FLAG_FALSE = frozenset({"false", "0", "no"})

# Plain ASCII decimal only: no `1_000`, exponents, `nan`/`inf` or non-ASCII digits.
_NUMBER_RE = re.compile(r"[+-]?[0-9]+(?P<fraction>\.[0-9]+)?", flags=re.ASCII)


@dataclass(frozen=True)
class BuiltQuery:
    """A parameterized SQL query (or fragment) ready for execution."""

    sql: str
    params: tuple[Any, ...]


def _coerce_text(key: str, value: FieldValue) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value


def _coerce_numeric(key: str, value: FieldValue) -> int | float | Decimal:
    # bool is an int subclass; `minSalary=true` is a caller mistake, not 1.
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number")
    if isinstance(value, int):
        return value
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValidationError(f"{key} must be a finite number")
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(f"{key} must be a finite number")
        return value
    if isinstance(value, str):
        match = _NUMBER_RE.fullmatch(value.strip())
        if match is None:
            raise ValidationError(f"{key} must be a number")
        if match.group("fraction") is None:
            return int(match.group(0))
        number = float(match.group(0))
        if not math.isfinite(number):
            raise ValidationError(f"{key} must be a finite number")
        return number
    raise ValidationError(f"{key} must be a number")


def _coerce_flag(key: str, value: FieldValue) -> bool:
    """Interpret a flag value; `None`, zero and the empty string are falsy."""

    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, (int, float, Decimal)):
        if isinstance(value, Decimal) and not value.is_finite():
            raise ValidationError(f"{key} must be true or false")
        if isinstance(value, float) and not math.isfinite(value):
            raise ValidationError(f"{key} must be true or false")
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if not text or text in _FLAG_FALSE:
            return False
        if text in _FLAG_TRUE:
            return True
    raise ValidationError(f"{key} must be true or false")


_COERCERS = {
    FilterKind.text: _coerce_text,
    FilterKind.numeric: _coerce_numeric,
    FilterKind.flag: _coerce_flag,
}


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _build_field_clause(field: FilterField, value: Any) -> tuple[str | None, list[Any]]:
    if field.kind == FilterKind.flag:
        if not value:
            return None, []
        return f"{field.column} {field.operator}", []

    if field.kind == FilterKind.text:
        # Lowercased by Postgres, like the column, so both sides agree on non-ASCII text.
        pattern = f"%{_escape_like(value)}%"
        return f"{field.column} {field.operator} LOWER(%s)", [pattern]

    return f"{field.column} {field.operator} %s", [value]


def _check_ranges(values: Mapping[str, Any], schema: FilterSchema) -> None:
    for min_key, max_key in schema.ranges:
        if min_key in values and max_key in values and values[min_key] > values[max_key]:
            raise ValidationError(f"{min_key} must not be greater than {max_key}")


def build_predicate(filters: Mapping[str, FieldValue], schema: FilterSchema) -> BuiltQuery:
    """Build a `WHERE` predicate from search filters.

    Clauses are combined with `AND` in the schema's field order. An empty filter (or one whose only
    key is a falsy flag) yields the always-true predicate.

    Raises:
        ValidationError: On unknown keys, values of the wrong type, or an inverted min/max pair.
    """

    unknown = sorted(key for key in filters if key not in schema.keys)
    if unknown:
        raise ValidationError(f"Improper search phrase: {', '.join(unknown)}")

    values: dict[str, Any] = {}
    for field in schema.fields:
        if field.key in filters:
            values[field.key] = _COERCERS[field.kind](field.key, filters[field.key])

    _check_ranges(values, schema)

    clauses: list[str] = []
    params: list[Any] = []
    for field in schema.fields:
        if field.key not in values:
            continue
        clause, p = _build_field_clause(field, values[field.key])
        if clause is None:
            continue
        clauses.append(clause)
        params.extend(p)

    if not clauses:
        return BuiltQuery(sql=TRUE_PREDICATE, params=())
    return BuiltQuery(sql=" AND ".join(clauses), params=tuple(params))


def column_list(columns: Iterable[str]) -> str:
    """Render an allowlisted column list as quoted identifiers."""

    return ", ".join(quote_ident(c) for c in columns)


def build_select(
        table: str,
        columns: Iterable[str],
        *,
        order_by: str,
        predicate: BuiltQuery | None = None,
) -> BuiltQuery:
    """Build a `SELECT` over an allowlisted table, optionally restricted by a predicate."""

    sql = f"SELECT {column_list(columns)} FROM {table}"
    params: tuple[Any, ...] = ()
    if predicate is not None:
        sql += f" WHERE {predicate.sql}"
        params = predicate.params
    sql += f" ORDER BY {quote_ident(order_by)}"
    return BuiltQuery(sql=sql, params=params)


def build_update(
        table: str,
        *,
        key_column: str,
        key: Any,
        fields: Mapping[str, FieldValue],
        aliases: Mapping[str, str],
        returning: Iterable[str],
) -> BuiltQuery:
    """Build a single-row partial `UPDATE ... RETURNING` keyed by `key_column`.

    The key is bound after the SET values, so it always takes the last placeholder.
    """

    set_clause = build_set_clause(fields, aliases)
    sql = (
        f"UPDATE {table} SET {set_clause.sql} "
        f"WHERE {quote_ident(key_column)} = %s "
        f"RETURNING {column_list(returning)}"
    )
    return BuiltQuery(sql=sql, params=(*set_clause.params, key))
