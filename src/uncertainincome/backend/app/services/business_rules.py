"""Business rule checks applied before and during income calculations.

Rules run in a fixed order and the first violation wins:

1. verification method / income type combination
2. future dates (payslip end date, then employment start date)
3. payslip end date on or after the employment start date
4. minimum employment duration, unless an annual override is supplied
5. prior financial year figures required early in the financial year

Zero pay cycles and negative derived values are detected by the calculators
through :func:`validate_pay_cycles` and :func:`validate_non_negative`.

Rule 4 is not an error: it yields an :class:`EligibilityOutcome` so callers can
report an ineligible result instead of a failure.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Sequence

from uncertainincome.backend.app.models import (
    AnnualIncomeRequest,
    EmploymentIncomeRequest,
)
from uncertainincome.backend.config.engine_config import (
    AnnualIncomeConfig,
    CalculationConfig,
)

from .dates import add_months, days_between, fy_start
from .errors import BusinessRuleError

DEFAULT_MINIMUM_EMPLOYMENT_DAYS = 180


class EligibilityOutcome(str, Enum):
    ELIGIBLE = "ELIGIBLE"
    INELIGIBLE_EMPLOYMENT_DURATION = "INELIGIBLE_EMPLOYMENT_DURATION"


def _method_value(method: Any) -> str | None:
    if method is None:
        return None
    return str(getattr(method, "value", method))


def validate_verification_method(
    income_type: str,
    verification_method: Any,
    allowed_methods: Sequence[str],
) -> None:
    """Ensure ``verification_method`` is acceptable for ``income_type``."""

    method = _method_value(verification_method)
    if allowed_methods and method is None:
        raise BusinessRuleError.invalid_combination("undefined", income_type)
    if not allowed_methods and method is not None:
        raise BusinessRuleError.invalid_combination(method, income_type)
    if allowed_methods and method not in allowed_methods:
        raise BusinessRuleError.invalid_combination(method, income_type)


def validate_dates(
    end_date: date,
    start_date: date | None = None,
    *,
    today: date | None = None,
) -> None:
    """Reject future dates and a payslip that predates the employment start."""

    reference = today or date.today()
    if end_date > reference:
        raise BusinessRuleError.future_date(
            "endDateLatestPayslip", end_date.isoformat()
        )
    if start_date is None:
        return
    if start_date > reference:
        raise BusinessRuleError.future_date(
            "employmentStartDate", start_date.isoformat()
        )
    if end_date < start_date:
        raise BusinessRuleError.invalid_date_range(
            end_date.isoformat(), start_date.isoformat()
        )


def check_employment_duration(
    start_date: date,
    end_date: date,
    annual_override_amount: float | None = None,
    *,
    minimum_days: int = DEFAULT_MINIMUM_EMPLOYMENT_DAYS,
) -> EligibilityOutcome:
    duration = days_between(start_date, end_date)
    if duration >= minimum_days:
        return EligibilityOutcome.ELIGIBLE
    if annual_override_amount is not None and annual_override_amount > 0:
        return EligibilityOutcome.ELIGIBLE
    return EligibilityOutcome.INELIGIBLE_EMPLOYMENT_DURATION


def require_employment_duration(
    start_date: date,
    end_date: date,
    annual_override_amount: float | None = None,
    *,
    minimum_days: int = DEFAULT_MINIMUM_EMPLOYMENT_DAYS,
) -> None:
    """Raise instead of returning an outcome when the duration rule fails."""

    outcome = check_employment_duration(
        start_date,
        end_date,
        annual_override_amount,
        minimum_days=minimum_days,
    )
    if outcome is EligibilityOutcome.INELIGIBLE_EMPLOYMENT_DURATION:
        raise BusinessRuleError.insufficient_employment_duration(
            days_between(start_date, end_date), minimum_days
        )


def validate_last_fy_income(
    end_date: date,
    last_fy_annual_income: float | None,
    required_months: int,
) -> None:
    """Require prior-year income when the payslip is early in the financial year."""

    current_fy_start = fy_start(end_date)
    threshold = add_months(current_fy_start, required_months)
    if end_date < threshold and last_fy_annual_income is None:
        raise BusinessRuleError.missing_last_fy_income(
            days_between(current_fy_start, end_date), required_months
        )


def validate_last_fy_bonus(
    config: AnnualIncomeConfig,
    verification_method: Any,
    prior_amount: float | None,
) -> None:
    if config.averages_years(_method_value(verification_method)) and prior_amount is None:
        raise BusinessRuleError.missing_last_fy_bonus()


def validate_pay_cycles(pay_cycles: int, end_date: date, start_date: date) -> None:
    if pay_cycles == 0:
        raise BusinessRuleError.zero_pay_cycles(
            end_date.isoformat(), start_date.isoformat()
        )


def validate_non_negative(value: float, calculation_type: str) -> None:
    if value < 0:
        raise BusinessRuleError.negative_calculated_value(calculation_type, value)


def validate_employment_based_income(
    request: EmploymentIncomeRequest,
    config: CalculationConfig,
    *,
    today: date | None = None,
    minimum_days: int = DEFAULT_MINIMUM_EMPLOYMENT_DAYS,
) -> EligibilityOutcome:
    """Run rules 1-5 for a payslip-driven income request."""

    validate_verification_method(
        request.income_type,
        request.verification_method,
        config.verification_methods,
    )
    validate_dates(
        request.end_date_latest_payslip,
        request.employment_start_date,
        today=today,
    )

    outcome = check_employment_duration(
        request.employment_start_date,
        request.end_date_latest_payslip,
        request.annual_override_amount,
        minimum_days=minimum_days,
    )
    if outcome is not EligibilityOutcome.ELIGIBLE:
        return outcome

    validate_last_fy_income(
        request.end_date_latest_payslip,
        request.last_fy_annual_income,
        config.last_fy_required_months,
    )
    return EligibilityOutcome.ELIGIBLE


def validate_annual_income(
    request: AnnualIncomeRequest, config: AnnualIncomeConfig
) -> None:
    validate_verification_method(
        request.income_type,
        request.verification_method,
        config.verification_methods,
    )
    validate_last_fy_bonus(config, request.verification_method, request.prior_amount)


__all__ = [
    "DEFAULT_MINIMUM_EMPLOYMENT_DAYS",
    "EligibilityOutcome",
    "check_employment_duration",
    "require_employment_duration",
    "validate_annual_income",
    "validate_dates",
    "validate_employment_based_income",
    "validate_last_fy_bonus",
    "validate_last_fy_income",
    "validate_non_negative",
    "validate_pay_cycles",
    "validate_verification_method",
]
