"""Step-by-step breakdown of a calculation for support and debugging."""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping

from uncertainincome.backend.app.models import EmploymentIncomeRequest
from uncertainincome.backend.config.engine_config import (
    EngineConfiguration,
    load_engine_configuration,
)

from .calculation_service import build_success_payload, parse_request
from .calculators import build_rolling_window, calculate_income, compute_core
from .calculators.utils import pay_cycle_period_start
from .dates import days_between, fy_bounds


def _explain_employment(
    request: EmploymentIncomeRequest, engine: EngineConfiguration
) -> dict[str, Any]:
    config = engine.calculation_config(request.income_type)
    rules = engine.business_rules
    payslip_date = request.end_date_latest_payslip
    bounds = fy_bounds(payslip_date)
    period_start = pay_cycle_period_start(request.employment_start_date, payslip_date)

    computation = compute_core(request, config, rules)
    details = computation.details

    explanation: dict[str, Any] = {
        "financialYear": {
            "start": bounds.start.isoformat(),
            "end": bounds.end.isoformat(),
        },
        "payCycles": {
            "periodStart": period_start.isoformat(),
            "periodEnd": payslip_date.isoformat(),
            "days": days_between(period_start, payslip_date),
            "daysInYear": rules.days_in_year,
            "frequencyMultiplier": computation.multiplier,
            "count": details.pay_cycle_count,
        },
        "employmentDays": days_between(request.employment_start_date, payslip_date),
        "priorityTiers": list(config.priority_tiers),
    }

    months = config.rolling_window_months
    if months is not None:
        window = build_rolling_window(
            payslip_date,
            computation.current_fy_start,
            details.average_amount_less_base_monthly,
            request.last_fy_annual_income,
            details.annual_base_salary,
            months,
        )
        explanation["rollingWindow"] = {
            "months": months,
            "entries": [
                {
                    "month": entry.month_start.strftime("%Y-%m"),
                    "currentFy": entry.in_current_fy,
                    "amount": entry.amount,
                }
                for entry in window
            ],
        }
    return explanation


def explain_request(
    payload: Mapping[str, Any],
    *,
    today: date | None = None,
    config: EngineConfiguration | None = None,
) -> dict[str, Any]:
    """Return the calculation result together with its intermediate figures."""

    engine = config or load_engine_configuration()
    request = parse_request(payload)
    result = calculate_income(request, engine, today=today)

    explanation: dict[str, Any] = {
        "result": build_success_payload(request, result, engine)["data"],
    }
    if isinstance(request, EmploymentIncomeRequest) and result.eligible:
        explanation["breakdown"] = _explain_employment(request, engine)
    elif isinstance(request, EmploymentIncomeRequest):
        explanation["breakdown"] = {
            "employmentDays": days_between(
                request.employment_start_date, request.end_date_latest_payslip
            ),
            "minimumEmploymentDays": engine.business_rules.minimum_employment_days,
        }
    else:
        annual = engine.annual_config(request.income_type)
        method = request.verification_method
        explanation["breakdown"] = {
            "currentAmount": request.current_amount,
            "priorAmount": request.prior_amount,
            "twoYearAverage": annual.averages_years(
                method.value if method is not None else None
            ),
        }
    return explanation


def format_explanation(explanation: Mapping[str, Any]) -> str:
    """Render ``explanation`` as indented plain text for terminals."""

    lines: list[str] = []

    def _walk(value: Any, indent: int, label: str | None) -> None:
        prefix = "  " * indent
        if isinstance(value, Mapping):
            if label is not None:
                lines.append(f"{prefix}{label}:")
                indent += 1
            for key, item in value.items():
                _walk(item, indent, str(key))
        elif isinstance(value, list):
            lines.append(f"{prefix}{label}:")
            for index, item in enumerate(value, start=1):
                _walk(item, indent + 1, f"[{index}]")
        else:
            lines.append(f"{prefix}{label}: {value}")

    _walk(explanation, 0, None)
    return "\n".join(lines)


__all__ = ["explain_request", "format_explanation"]
