"""Unit tests for the configuration-driven income calculators."""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from uncertainincome.backend.app.models import (
    CalculationDetails,
    IncomeResult,
    parse_income_request,
)
from uncertainincome.backend.app.services.calculators import (
    calculate_income,
    compute_core,
    conservative_average,
    resolve_priority,
)
from uncertainincome.backend.app.services.errors import BusinessRuleError, ErrorCode
from uncertainincome.backend.config.engine_config import EngineConfiguration

TODAY = date(2025, 6, 30)


def _calculate(payload: dict[str, Any], config: EngineConfiguration) -> IncomeResult:
    return calculate_income(parse_income_request(payload), config, today=TODAY)


def test_overtime_rolling_window_example(
    engine_config: EngineConfiguration, overtime_payload: dict[str, Any]
) -> None:
    result = _calculate(overtime_payload, engine_config)

    assert result.eligible is True
    assert result.allowable_annual_income == 177000.0
    assert result.calculation_details == CalculationDetails(
        annual_base_salary=24000,
        expected_ytd_base_salary=10000,
        pay_cycle_count=5,
        average_amount_per_pay_cycle=17600.0,
        average_amount_less_base_annual=187200.0,
        average_amount_less_base_monthly=15600.0,
    )


def test_calculation_is_idempotent(
    engine_config: EngineConfiguration, overtime_payload: dict[str, Any]
) -> None:
    first = _calculate(overtime_payload, engine_config)
    second = _calculate(dict(overtime_payload), engine_config)

    assert first == second


def test_commissions_prefer_actual_ytd_commission(
    engine_config: EngineConfiguration,
) -> None:
    payload = {
        "incomeType": "COMMISSIONS",
        "salaryFrequency": "MONTHLY",
        "baseIncome": 5000,
        "endDateLatestPayslip": "2025-03-01",
        "employmentStartDate": "2023-01-01",
        "ytdAmountLatestPayslip": 60000,
        "lastFyAnnualIncome": 100000,
        "annualOverrideAmount": 70000,
        "actualYtdCommission": 85000,
    }

    result = _calculate(payload, engine_config)

    assert result.allowable_annual_income == 85000
    assert result.calculation_details.pay_cycle_count == 8
    assert result.calculation_details.average_amount_less_base_annual == 30000.0


def test_commissions_rolling_twelve_months_without_overrides(
    engine_config: EngineConfiguration,
) -> None:
    payload = {
        "incomeType": "COMMISSIONS",
        "salaryFrequency": "MONTHLY",
        "baseIncome": 5000,
        "endDateLatestPayslip": "2025-03-01",
        "employmentStartDate": "2023-01-01",
        "ytdAmountLatestPayslip": 60000,
        "lastFyAnnualIncome": 100000,
        "actualYtdCommission": 0,
    }

    result = _calculate(payload, engine_config)

    # Mar-Jun 2024 use (100000 - 60000) / 12, Jul 2024-Feb 2025 use 2500
    assert result.allowable_annual_income == pytest.approx(4 * 40000 / 12 + 8 * 2500)


def test_override_bypasses_short_employment(engine_config: EngineConfiguration) -> None:
    payload = {
        "incomeType": "OVERTIME",
        "verificationMethod": "ESSENTIAL_SERVICES",
        "salaryFrequency": "MONTHLY",
        "baseIncome": 3000,
        "endDateLatestPayslip": "2025-02-01",
        "employmentStartDate": "2024-09-01",
        "ytdAmountLatestPayslip": 20000,
        "annualOverrideAmount": 80000,
    }

    result = _calculate(payload, engine_config)

    assert result.eligible is True
    assert result.allowable_annual_income == 80000
    assert result.calculation_details.pay_cycle_count == 5


def test_short_employment_returns_ineligible_result(
    engine_config: EngineConfiguration,
) -> None:
    payload = {
        "incomeType": "OVERTIME",
        "verificationMethod": "ESSENTIAL_SERVICES",
        "salaryFrequency": "MONTHLY",
        "baseIncome": 3000,
        "endDateLatestPayslip": "2025-02-01",
        "employmentStartDate": "2024-09-01",
        "ytdAmountLatestPayslip": 20000,
    }

    result = _calculate(payload, engine_config)

    assert result == IncomeResult.ineligible()
    assert result.eligible is False
    assert result.allowable_annual_income == 0
    assert result.calculation_details == CalculationDetails()


def test_zero_ytd_amount_is_eligible_with_zero_income(
    engine_config: EngineConfiguration,
) -> None:
    payload = {
        "incomeType": "CASUAL",
        "salaryFrequency": "FORTNIGHTLY",
        "endDateLatestPayslip": "2025-03-15",
        "employmentStartDate": "2023-01-01",
        "ytdAmountLatestPayslip": 0,
    }

    result = _calculate(payload, engine_config)

    assert result.eligible is True
    assert result.allowable_annual_income == 0
    assert result.calculation_details.pay_cycle_count == 19


def test_casual_weekly_window_uses_last_fy_income(
    engine_config: EngineConfiguration,
) -> None:
    payload = {
        "incomeType": "CASUAL",
        "salaryFrequency": "WEEKLY",
        "endDateLatestPayslip": "2024-10-15",
        "employmentStartDate": "2022-03-01",
        "ytdAmountLatestPayslip": 15000,
        "lastFyAnnualIncome": 52000,
    }

    result = _calculate(payload, engine_config)

    details = result.calculation_details
    assert details.annual_base_salary == 0
    assert details.expected_ytd_base_salary == 0
    assert details.pay_cycle_count == 16
    assert details.average_amount_per_pay_cycle == 937.5
    assert details.average_amount_less_base_annual == 48750.0
    assert result.allowable_annual_income == pytest.approx(50375.0)


def test_zero_pay_cycles_raise(engine_config: EngineConfiguration) -> None:
    payload = {
        "incomeType": "CONTRACT_VARIABLE",
        "salaryFrequency": "MONTHLY",
        "endDateLatestPayslip": "2024-07-05",
        "employmentStartDate": "2023-01-01",
        "ytdAmountLatestPayslip": 1000,
        "lastFyAnnualIncome": 40000,
    }

    with pytest.raises(BusinessRuleError) as excinfo:
        _calculate(payload, engine_config)

    assert excinfo.value.code == ErrorCode.ZERO_PAY_CYCLES.value


def test_ytd_below_base_salary_is_negative(engine_config: EngineConfiguration) -> None:
    payload = {
        "incomeType": "OVERTIME",
        "verificationMethod": "NON_ESSENTIAL_SERVICES",
        "salaryFrequency": "MONTHLY",
        "baseIncome": 3000,
        "endDateLatestPayslip": "2024-12-01",
        "employmentStartDate": "2024-01-01",
        "ytdAmountLatestPayslip": 10000,
        "lastFyAnnualIncome": 40000,
    }

    with pytest.raises(BusinessRuleError) as excinfo:
        _calculate(payload, engine_config)

    detail = excinfo.value.errors[0]
    assert detail.code == ErrorCode.NEGATIVE_CALCULATED_VALUE.value
    assert detail.value == -12000.0


def test_standard_calculation_without_rolling_window(
    engine_config: EngineConfiguration,
) -> None:
    casual = engine_config.calculation_config("CASUAL")
    config = engine_config.model_copy(
        update={
            "employment_income": {
                **engine_config.employment_income,
                "CASUAL": casual.model_copy(update={"rolling_window_months": None}),
            }
        }
    )
    payload = {
        "incomeType": "CASUAL",
        "salaryFrequency": "WEEKLY",
        "endDateLatestPayslip": "2024-10-15",
        "employmentStartDate": "2022-03-01",
        "ytdAmountLatestPayslip": 15000,
        "lastFyAnnualIncome": 52000,
    }

    result = _calculate(payload, config)

    assert result.allowable_annual_income == 48750.0


def test_compute_core_exposes_financial_year_start(
    engine_config: EngineConfiguration, overtime_payload: dict[str, Any]
) -> None:
    request = parse_income_request(overtime_payload)

    computation = compute_core(
        request,
        engine_config.calculation_config("OVERTIME"),
        engine_config.business_rules,
    )

    assert computation.current_fy_start == date(2024, 7, 1)
    assert computation.multiplier == 12


@pytest.mark.parametrize(
    ("overrides", "calculated", "expected"),
    [
        ({"annualOverrideAmount": 0}, 5000.0, 5000.0),
        ({"annualOverrideAmount": 9000}, 5000.0, 9000),
        ({"actualYtdCommission": 7000, "annualOverrideAmount": 9000}, 5000.0, 7000),
        ({}, -10.0, 0.0),
    ],
)
def test_resolve_priority(
    engine_config: EngineConfiguration,
    overrides: dict[str, Any],
    calculated: float,
    expected: float,
) -> None:
    payload = {
        "incomeType": "COMMISSIONS",
        "salaryFrequency": "MONTHLY",
        "baseIncome": 5000,
        "endDateLatestPayslip": "2025-03-01",
        "employmentStartDate": "2023-01-01",
        "ytdAmountLatestPayslip": 60000,
        **overrides,
    }
    request = parse_income_request(payload)
    tiers = engine_config.calculation_config("COMMISSIONS").priority_tiers

    assert resolve_priority(request, tiers, calculated) == expected


def test_bonus_two_year_takes_conservative_figure(
    engine_config: EngineConfiguration,
) -> None:
    result = _calculate(
        {
            "incomeType": "BONUS",
            "verificationMethod": "TWO_YEAR_VERIFICATION",
            "currentFyBonus": 30000,
            "lastFyBonus": 60000,
        },
        engine_config,
    )

    assert result.allowable_annual_income == 30000
    assert result.eligible is True
    assert result.calculation_details == CalculationDetails(
        average_amount_less_base_annual=30000,
        average_amount_less_base_monthly=2500.0,
    )


def test_bonus_one_year_uses_current_year(engine_config: EngineConfiguration) -> None:
    result = _calculate(
        {
            "incomeType": "BONUS",
            "verificationMethod": "ONE_YEAR_VERIFICATION",
            "currentFyBonus": 42000,
            "lastFyBonus": 10000,
        },
        engine_config,
    )

    assert result.allowable_annual_income == 42000


def test_investment_income_averages_two_years(
    engine_config: EngineConfiguration,
) -> None:
    result = _calculate(
        {"incomeType": "INVESTMENT_INTEREST", "currentFy": 10000, "lastFy": 4000},
        engine_config,
    )

    assert result.allowable_annual_income == 7000
    assert result.calculation_details.pay_cycle_count == 0


def test_conservative_average_never_exceeds_current_year() -> None:
    assert conservative_average(30000, 60000) == 30000
    assert conservative_average(60000, 30000) == 45000
