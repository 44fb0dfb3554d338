"""Domain-specific calculation helpers."""

from __future__ import annotations

from datetime import date
from typing import Union

from uncertainincome.backend.app.models import (
    AnnualIncomeRequest,
    EmploymentIncomeRequest,
    IncomeResult,
)
from uncertainincome.backend.config.engine_config import (
    EngineConfiguration,
    load_engine_configuration,
)

from .annual import calculate_annual_income, conservative_average
from .employment import (
    calculate_employment_income,
    compute_core,
    resolve_priority,
)
from .rolling import RollingMonth, build_rolling_window, rolling_aggregate
from .utils import count_pay_cycles, frequency_multiplier, round_pay_cycles


def calculate_income(
    request: Union[EmploymentIncomeRequest, AnnualIncomeRequest],
    config: EngineConfiguration | None = None,
    *,
    today: date | None = None,
) -> IncomeResult:
    """Dispatch ``request`` to the calculation registered for its income type."""

    engine = config or load_engine_configuration()
    income_type = request.income_type
    if income_type in engine.employment_income:
        return calculate_employment_income(
            request,
            engine.calculation_config(income_type),
            engine.business_rules,
            today=today,
        )
    return calculate_annual_income(request, engine.annual_config(income_type))


__all__ = [
    "RollingMonth",
    "build_rolling_window",
    "calculate_annual_income",
    "calculate_employment_income",
    "calculate_income",
    "compute_core",
    "conservative_average",
    "count_pay_cycles",
    "frequency_multiplier",
    "resolve_priority",
    "rolling_aggregate",
    "round_pay_cycles",
]
