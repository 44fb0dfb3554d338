"""Rolling-window aggregation across financial-year boundaries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Sequence

from ..dates import add_months, month_starts
from .utils import MONTHS_PER_YEAR


@dataclass(frozen=True, slots=True)
class RollingMonth:
    """Contribution of a single calendar month to the rolling window."""

    month_start: date
    in_current_fy: bool
    amount: float


def window_first_month(payslip_date: date, months: int) -> date:
    """Return the first month of a window ending the month before the payslip."""

    last_month = add_months(payslip_date.replace(day=1), -1)
    return add_months(last_month, -(months - 1))


def prior_fy_monthly_amount(
    last_fy_annual_income: float | None, annual_base_salary: float
) -> float | None:
    if last_fy_annual_income is None:
        return None
    return max(0.0, last_fy_annual_income - annual_base_salary) / MONTHS_PER_YEAR


def build_rolling_window(
    payslip_date: date,
    current_fy_start: date,
    current_monthly_amount: float,
    last_fy_annual_income: float | None,
    annual_base_salary: float,
    months: int,
) -> list[RollingMonth]:
    """Break the rolling window into per-month contributions, oldest first.

    Months starting on or after ``current_fy_start`` contribute the current
    monthly figure. Earlier months use the prior financial year's annual
    income net of base salary, or nothing when that figure is unknown. A
    window reaching back more than one financial year reuses the same prior
    figure for every earlier month.
    """

    prior_amount = prior_fy_monthly_amount(last_fy_annual_income, annual_base_salary)
    window: list[RollingMonth] = []
    for month_start in month_starts(window_first_month(payslip_date, months), months):
        if month_start >= current_fy_start:
            window.append(RollingMonth(month_start, True, current_monthly_amount))
        else:
            window.append(
                RollingMonth(
                    month_start,
                    False,
                    prior_amount if prior_amount is not None else 0.0,
                )
            )
    return window


def rolling_aggregate(window: Sequence[RollingMonth], months: int) -> float:
    """Annualise the summed window contributions."""

    total = 0.0
    for month in window:
        total += month.amount
    return total * (MONTHS_PER_YEAR / months)


def calculate_rolling_amount(
    payslip_date: date,
    current_fy_start: date,
    current_monthly_amount: float,
    last_fy_annual_income: float | None,
    annual_base_salary: float,
    months: int,
) -> float:
    window = build_rolling_window(
        payslip_date,
        current_fy_start,
        current_monthly_amount,
        last_fy_annual_income,
        annual_base_salary,
        months,
    )
    return rolling_aggregate(window, months)


__all__ = [
    "RollingMonth",
    "build_rolling_window",
    "calculate_rolling_amount",
    "prior_fy_monthly_amount",
    "rolling_aggregate",
    "window_first_month",
]
