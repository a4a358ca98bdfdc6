"""Record shapes for companies and jobs (Pydantic models).

Field names are snake_case in Python and camelCase on the wire (`numEmployees`, `companyHandle`).
Rows read from Postgres are validated into these models before being returned to callers.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# A single value accepted in an update payload or a search filter.
FieldValue = str | int | float | Decimal | bool | None

_RECORD_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="forbid",
)

# Incoming data is normalized; rows read back are returned exactly as stored.
_INPUT_CONFIG = ConfigDict(**_RECORD_CONFIG, str_strip_whitespace=True)


class CompanyNew(BaseModel):
    """Data required to create a company."""

    model_config = _INPUT_CONFIG

    handle: str = Field(min_length=1, max_length=25)
    name: str = Field(min_length=1)
    description: str
    num_employees: int | None = Field(default=None, ge=0)
    logo_url: str | None = None


class Company(BaseModel):
    """A company row."""

    model_config = _RECORD_CONFIG

    handle: str
    name: str
    description: str
    num_employees: int | None = None
    logo_url: str | None = None


class JobNew(BaseModel):
    """Data required to create a job."""

    model_config = _INPUT_CONFIG

    title: str = Field(min_length=1)
    salary: int | None = Field(default=None, ge=0)
    equity: Decimal | None = Field(default=None, ge=0, le=1)
    company_handle: str = Field(min_length=1, max_length=25)


class Job(BaseModel):
    """A job row."""

    model_config = _RECORD_CONFIG

    id: int
    title: str
    salary: int | None = None
    equity: Decimal | None = None
    company_handle: str
