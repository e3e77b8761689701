"""Accounting period entity."""

import re
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

PERIOD_CODE_RE = re.compile(r"^(\d{4})-(\d{2})$")


class PeriodStatus(str, Enum):
    """Lifecycle states of a period."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"
    LOCKED = "LOCKED"


def parse_period_code(code: str) -> tuple[int, int]:
    """Split a "YYYY-MM" code into (year, month). Raises ValueError if malformed."""
    match = PERIOD_CODE_RE.match(code or "")
    if not match:
        raise ValueError(f"Invalid period code '{code}', expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month in period code '{code}'")
    return year, month


def format_period_code(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


class Period(BaseModel):
    """A calendar month accounting window."""

    id: int | None = None
    code: str
    year: int
    month: int
    status: PeriodStatus = PeriodStatus.OPEN
    opened_at: datetime | None = None
    closed_at: datetime | None = None
    closed_by: str | None = None
    locked_at: datetime | None = None
    locked_by: str | None = None
    created_by: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @classmethod
    def from_code(cls, code: str, **kwargs) -> "Period":
        year, month = parse_period_code(code)
        return cls(code=format_period_code(year, month), year=year, month=month, **kwargs)

    @property
    def is_open(self) -> bool:
        return self.status == PeriodStatus.OPEN
