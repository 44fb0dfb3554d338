"""Annual comparison calculation for bonus and investment income."""

from __future__ import annotations

from uncertainincome.backend.app.models import (
    AnnualIncomeRequest,
    CalculationDetails,
    IncomeResult,
    IncomeType,
)
from uncertainincome.backend.config.engine_config import AnnualIncomeConfig

from ..business_rules import validate_annual_income, validate_non_negative
from .utils import MONTHS_PER_YEAR


def _calculation_label(income_type: str) -> str:
    if income_type == IncomeType.BONUS.value:
        return "bonusCalculation"
    return "investmentCalculation"


def conservative_average(current_amount: float, prior_amount: float) -> float:
    """Return the lower of the two-year average and the current year."""

    average = (current_amount + prior_amount) / 2
    return min(average, current_amount)


def calculate_annual_income(
    request: AnnualIncomeRequest, config: AnnualIncomeConfig
) -> IncomeResult:
    """Validate and calculate an annual-comparison income request."""

    validate_annual_income(request, config)

    method = request.verification_method
    if config.averages_years(method.value if method is not None else None):
        # prior figure presence is guaranteed by validate_annual_income
        calculated = conservative_average(request.current_amount, request.prior_amount)
    else:
        calculated = request.current_amount

    validate_non_negative(calculated, _calculation_label(request.income_type))

    details = CalculationDetails(
        average_amount_less_base_annual=calculated,
        average_amount_less_base_monthly=calculated / MONTHS_PER_YEAR,
    )
    return IncomeResult(
        allowable_annual_income=max(0.0, calculated),
        calculation_details=details,
        eligible=True,
    )


__all__ = ["calculate_annual_income", "conservative_average"]
