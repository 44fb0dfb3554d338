"""Utility helpers for calculator modules."""

from __future__ import annotations

import math
from datetime import date
from typing import Any

from uncertainincome.backend.config.engine_config import BusinessRules

from ..dates import days_between, fy_start

MONTHS_PER_YEAR = 12


def _frequency_key(frequency: Any) -> str:
    return str(getattr(frequency, "value", frequency))


def frequency_multiplier(frequency: Any, rules: BusinessRules) -> int:
    """Return the number of pay periods per year for ``frequency``."""

    return rules.multiplier_for(_frequency_key(frequency))


def round_pay_cycles(raw_cycles: float, frequency: Any, rules: BusinessRules) -> int:
    """Apply the frequency-specific rounding rule to a fractional cycle count."""

    if _frequency_key(frequency) == "MONTHLY":
        fraction = raw_cycles - math.floor(raw_cycles)
        if fraction > rules.monthly_rounding_threshold:
            cycles = math.ceil(raw_cycles)
        else:
            cycles = math.floor(raw_cycles)
    else:
        cycles = math.ceil(raw_cycles)
    return max(0, cycles)


def pay_cycles_for_days(days: int, frequency: Any, rules: BusinessRules) -> int:
    raw_cycles = (days / rules.days_in_year) * frequency_multiplier(frequency, rules)
    return round_pay_cycles(raw_cycles, frequency, rules)


def pay_cycle_period_start(employment_start: date, payslip_date: date) -> date:
    """Return the later of the employment start and the payslip's FY start."""

    return max(employment_start, fy_start(payslip_date))


def count_pay_cycles(
    employment_start: date,
    payslip_date: date,
    frequency: Any,
    rules: BusinessRules,
) -> int:
    """Count pay cycles elapsed in the current financial year up to the payslip."""

    period_start = pay_cycle_period_start(employment_start, payslip_date)
    days = days_between(period_start, payslip_date)
    return pay_cycles_for_days(days, frequency, rules)


__all__ = [
    "MONTHS_PER_YEAR",
    "count_pay_cycles",
    "frequency_multiplier",
    "pay_cycle_period_start",
    "pay_cycles_for_days",
    "round_pay_cycles",
]
