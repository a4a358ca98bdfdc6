"""Partial-update SET clause builder.

Given the fields a caller wants to change and a table of API-name -> column-name aliases, produce a
`SET` fragment with one positional placeholder per field and the matching tuple of bound values:

    >>> build_set_clause({"firstName": "Aliya", "age": 32}, {"firstName": "first_name"})
    SetClause(sql='"first_name"=%s, "age"=%s', params=('Aliya', 32))

Both the fragment and the values come from a single pass over `fields`, so the i-th placeholder
always binds the i-th value. Values are never written into the SQL text, and `None` is kept as a
legitimate value (it sets the column to NULL).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from src.models.errors import ValidationError
from src.models.schema import FieldValue


@dataclass(frozen=True)
class SetClause:
    """A parameterized `SET` fragment plus its bound values."""

    sql: str
    params: tuple[FieldValue, ...]


def quote_ident(name: str) -> str:
    """Quote a SQL identifier, doubling any embedded double quote."""

    return '"' + name.replace('"', '""') + '"'


def build_set_clause(fields: Mapping[str, FieldValue], aliases: Mapping[str, str]) -> SetClause:
    """Build the `SET` fragment for a partial update.

    Raises:
        ValidationError: If `fields` is empty.
    """

    if not fields:
        raise ValidationError("No data")

    parts: list[str] = []
    params: list[FieldValue] = []
    for key, value in fields.items():
        column = aliases.get(key, key)
        parts.append(f"{quote_ident(column)}=%s")
        params.append(value)

    return SetClause(sql=", ".join(parts), params=tuple(params))
