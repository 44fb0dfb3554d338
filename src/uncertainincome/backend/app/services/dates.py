"""Financial-year and calendar helpers used by the income calculators.

The Australian financial year runs from 1 July to 30 June. Every helper works on
plain :class:`datetime.date` values and none of them consult the wall clock.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date

FY_START_MONTH = 7

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True, slots=True)
class FinancialYear:
    """Inclusive bounds of a single financial year."""

    start: date
    end: date

    def contains(self, value: date) -> bool:
        return self.start <= value <= self.end


def parse_date(value: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` string into a :class:`date`."""

    if not isinstance(value, str) or not _ISO_DATE.match(value):
        raise ValueError(f"Date '{value}' must use the YYYY-MM-DD format")
    return date.fromisoformat(value)


def fy_start(value: date) -> date:
    """Return 1 July of the financial year containing ``value``."""

    year = value.year if value.month >= FY_START_MONTH else value.year - 1
    return date(year, FY_START_MONTH, 1)


def fy_bounds(value: date) -> FinancialYear:
    start = fy_start(value)
    return FinancialYear(start=start, end=date(start.year + 1, 6, 30))


def days_between(start: date, end: date) -> int:
    """Return the signed number of days from ``start`` (exclusive) to ``end``."""

    return (end - start).days


def months_since_fy_start(value: date) -> int:
    start = fy_start(value)
    return (value.year - start.year) * 12 + value.month - start.month


def add_months(value: date, months: int) -> date:
    """Shift ``value`` by ``months`` calendar months, clipping the day."""

    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))


def is_same_fy(first: date, second: date) -> bool:
    return fy_start(first) == fy_start(second)


def month_starts(first: date, count: int) -> list[date]:
    """Return ``count`` consecutive first-of-month dates beginning at ``first``."""

    anchor = first.replace(day=1)
    return [add_months(anchor, offset) for offset in range(count)]


__all__ = [
    "FY_START_MONTH",
    "FinancialYear",
    "add_months",
    "days_between",
    "fy_bounds",
    "fy_start",
    "is_same_fy",
    "month_starts",
    "months_since_fy_start",
    "parse_date",
]
