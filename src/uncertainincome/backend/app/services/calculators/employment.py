"""Configuration-driven calculation for payslip-based income types."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Sequence

from uncertainincome.backend.app.models import (
    CalculationDetails,
    EmploymentIncomeRequest,
    IncomeResult,
)
from uncertainincome.backend.config.engine_config import (
    BusinessRules,
    CalculationConfig,
)

from ..business_rules import (
    EligibilityOutcome,
    validate_employment_based_income,
    validate_non_negative,
    validate_pay_cycles,
)
from ..dates import fy_start
from .rolling import calculate_rolling_amount
from .utils import MONTHS_PER_YEAR, count_pay_cycles, frequency_multiplier

NEGATIVE_ANNUAL_LABEL = "averageAmountLessBaseAnnual"


@dataclass(frozen=True, slots=True)
class EmploymentComputation:
    """Figures derived from a payslip before the priority tiers are applied."""

    details: CalculationDetails
    multiplier: int
    current_fy_start: date


def compute_core(
    request: EmploymentIncomeRequest,
    config: CalculationConfig,
    rules: BusinessRules,
) -> EmploymentComputation:
    """Annualise the year-to-date figure from the payslip."""

    payslip_date = request.end_date_latest_payslip
    base_income = request.base_amount
    multiplier = frequency_multiplier(request.salary_frequency, rules)
    annual_base_salary = base_income * multiplier if config.has_base_income else 0

    pay_cycles = count_pay_cycles(
        request.employment_start_date,
        payslip_date,
        request.salary_frequency,
        rules,
    )
    validate_pay_cycles(pay_cycles, payslip_date, request.employment_start_date)

    expected_ytd = base_income * pay_cycles if config.has_base_income else 0
    average_per_cycle = request.ytd_amount_latest_payslip / pay_cycles
    if config.has_base_income:
        less_base_annual = (average_per_cycle - base_income) * multiplier
    else:
        less_base_annual = average_per_cycle * multiplier
    validate_non_negative(less_base_annual, NEGATIVE_ANNUAL_LABEL)

    details = CalculationDetails(
        annual_base_salary=annual_base_salary,
        expected_ytd_base_salary=expected_ytd,
        pay_cycle_count=pay_cycles,
        average_amount_per_pay_cycle=average_per_cycle,
        average_amount_less_base_annual=less_base_annual,
        average_amount_less_base_monthly=less_base_annual / MONTHS_PER_YEAR,
    )
    return EmploymentComputation(
        details=details,
        multiplier=multiplier,
        current_fy_start=fy_start(payslip_date),
    )


def calculated_tier_amount(
    request: EmploymentIncomeRequest,
    config: CalculationConfig,
    computation: EmploymentComputation,
) -> float:
    """Return the figure offered by the ``calculated`` priority tier."""

    details = computation.details
    if config.rolling_window_months is None:
        return details.average_amount_less_base_annual
    return calculate_rolling_amount(
        request.end_date_latest_payslip,
        computation.current_fy_start,
        details.average_amount_less_base_monthly,
        request.last_fy_annual_income,
        details.annual_base_salary,
        config.rolling_window_months,
    )


def resolve_priority(
    request: EmploymentIncomeRequest,
    tiers: Sequence[str],
    calculated_amount: float,
) -> float:
    """Return the first strictly positive tier value, falling back to the calculation."""

    for tier in tiers:
        if tier == "actualYtd":
            actual = request.actual_ytd_amount
            if actual is not None and actual > 0:
                return actual
        elif tier == "override":
            override = request.annual_override_amount
            if override is not None and override > 0:
                return override
        elif tier == "calculated":
            return max(0.0, calculated_amount)
    return max(0.0, calculated_amount)


def calculate_employment_income(
    request: EmploymentIncomeRequest,
    config: CalculationConfig,
    rules: BusinessRules,
    *,
    today: date | None = None,
) -> IncomeResult:
    """Validate and calculate a payslip-driven income request."""

    outcome = validate_employment_based_income(
        request,
        config,
        today=today,
        minimum_days=rules.minimum_employment_days,
    )
    if outcome is EligibilityOutcome.INELIGIBLE_EMPLOYMENT_DURATION:
        return IncomeResult.ineligible()

    computation = compute_core(request, config, rules)
    calculated = calculated_tier_amount(request, config, computation)
    allowable = resolve_priority(request, config.priority_tiers, calculated)

    return IncomeResult(
        allowable_annual_income=allowable,
        calculation_details=computation.details,
        eligible=True,
    )


__all__ = [
    "EmploymentComputation",
    "calculate_employment_income",
    "calculated_tier_amount",
    "compute_core",
    "resolve_priority",
]
