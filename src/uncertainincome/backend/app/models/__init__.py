"""Typed request/result models shared across the calculation services.

Requests are validated pydantic models (see :mod:`.api`); derived results are
lightweight frozen dataclasses so the calculators can build them cheaply and
the response builder can serialise them without another validation pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .api import (
    AnnualIncomeRequest,
    BonusRequest,
    CasualRequest,
    CommissionsRequest,
    ContractVariableRequest,
    EmploymentIncomeRequest,
    IncomeRequest,
    IncomeType,
    InvestmentRequest,
    OvertimeRequest,
    SalaryFrequency,
    VerificationMethod,
    parse_income_request,
)

__all__ = [
    "AnnualIncomeRequest",
    "BonusRequest",
    "CalculationDetails",
    "CasualRequest",
    "CommissionsRequest",
    "ContractVariableRequest",
    "EmploymentIncomeRequest",
    "IncomeRequest",
    "IncomeResult",
    "IncomeType",
    "InvestmentRequest",
    "OvertimeRequest",
    "SalaryFrequency",
    "VerificationMethod",
    "parse_income_request",
]


@dataclass(frozen=True, slots=True)
class CalculationDetails:
    """Intermediate figures reported with every calculation result."""

    annual_base_salary: float = 0.0
    expected_ytd_base_salary: float = 0.0
    pay_cycle_count: int = 0
    average_amount_per_pay_cycle: float = 0.0
    average_amount_less_base_annual: float = 0.0
    average_amount_less_base_monthly: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return {
            "annualBaseSalary": self.annual_base_salary,
            "expectedYtdBaseSalary": self.expected_ytd_base_salary,
            "payCycleCount": self.pay_cycle_count,
            "averageAmountPerPayCycle": self.average_amount_per_pay_cycle,
            "averageAmountLessBaseAnnual": self.average_amount_less_base_annual,
            "averageAmountLessBaseMonthly": self.average_amount_less_base_monthly,
        }


@dataclass(frozen=True, slots=True)
class IncomeResult:
    """Outcome of a single income calculation."""

    allowable_annual_income: float
    calculation_details: CalculationDetails = field(default_factory=CalculationDetails)
    eligible: bool = True

    @classmethod
    def ineligible(cls) -> IncomeResult:
        return cls(
            allowable_annual_income=0.0,
            calculation_details=CalculationDetails(),
            eligible=False,
        )
