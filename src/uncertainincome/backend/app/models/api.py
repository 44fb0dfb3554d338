"""Pydantic models describing the public API surface."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    TypeAdapter,
    field_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

__all__ = [
    "AnnualIncomeRequest",
    "BonusRequest",
    "CasualRequest",
    "CommissionsRequest",
    "ContractVariableRequest",
    "EmploymentIncomeRequest",
    "IncomeRequest",
    "IncomeType",
    "InvestmentRequest",
    "OvertimeRequest",
    "SalaryFrequency",
    "VerificationMethod",
    "parse_income_request",
]

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class IncomeType(str, Enum):
    OVERTIME = "OVERTIME"
    CASUAL = "CASUAL"
    CONTRACT_VARIABLE = "CONTRACT_VARIABLE"
    COMMISSIONS = "COMMISSIONS"
    BONUS = "BONUS"
    INVESTMENT_SHARES = "INVESTMENT_SHARES"
    INVESTMENT_INTEREST = "INVESTMENT_INTEREST"


class SalaryFrequency(str, Enum):
    WEEKLY = "WEEKLY"
    FORTNIGHTLY = "FORTNIGHTLY"
    MONTHLY = "MONTHLY"


class VerificationMethod(str, Enum):
    NON_ESSENTIAL_SERVICES = "NON_ESSENTIAL_SERVICES"
    ESSENTIAL_SERVICES = "ESSENTIAL_SERVICES"
    ONE_YEAR_VERIFICATION = "ONE_YEAR_VERIFICATION"
    TWO_YEAR_VERIFICATION = "TWO_YEAR_VERIFICATION"


def _parse_iso_date(value: Any) -> Any:
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        raise PydanticCustomError(
            "invalid_date_format",
            "Date '{value}' must use the YYYY-MM-DD format",
            {"value": value},
        )
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise PydanticCustomError(
            "invalid_date_format",
            "Date '{value}' is not a valid calendar date",
            {"value": value},
        ) from None


def _check_precision(value: float | None) -> float | None:
    if value is None:
        return value
    if Decimal(str(value)).as_tuple().exponent < -2:
        raise PydanticCustomError(
            "invalid_decimal_precision",
            "Amount {value} must have at most two decimal places",
            {"value": value},
        )
    return value


class _RequestModel(BaseModel):
    """Shared configuration: camelCase wire names, frozen, no stray fields."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
    )


class EmploymentIncomeRequest(_RequestModel):
    """Fields shared by the payslip-driven income types."""

    income_type: str
    salary_frequency: SalaryFrequency
    end_date_latest_payslip: date
    employment_start_date: date
    ytd_amount_latest_payslip: StrictFloat = Field(..., ge=0)
    last_fy_annual_income: StrictFloat | None = Field(default=None, ge=0)
    annual_override_amount: StrictFloat | None = Field(default=None, ge=0)
    verification_method: VerificationMethod | None = None

    @field_validator("end_date_latest_payslip", "employment_start_date", mode="before")
    @classmethod
    def _validate_dates(cls, value: Any) -> Any:
        return _parse_iso_date(value)

    @field_validator(
        "ytd_amount_latest_payslip",
        "last_fy_annual_income",
        "annual_override_amount",
    )
    @classmethod
    def _validate_precision(cls, value: float | None) -> float | None:
        return _check_precision(value)

    @property
    def base_amount(self) -> float:
        return 0.0

    @property
    def actual_ytd_amount(self) -> float | None:
        return None


class OvertimeRequest(EmploymentIncomeRequest):
    income_type: Literal["OVERTIME"]
    base_income: StrictFloat = Field(..., ge=0)

    @field_validator("base_income")
    @classmethod
    def _validate_base_precision(cls, value: float) -> float:
        return _check_precision(value)

    @property
    def base_amount(self) -> float:
        return self.base_income


class CasualRequest(EmploymentIncomeRequest):
    income_type: Literal["CASUAL"]


class ContractVariableRequest(EmploymentIncomeRequest):
    income_type: Literal["CONTRACT_VARIABLE"]


class CommissionsRequest(EmploymentIncomeRequest):
    income_type: Literal["COMMISSIONS"]
    base_income: StrictFloat = Field(..., ge=0)
    actual_ytd_commission: StrictFloat | None = Field(default=None, ge=0)

    @field_validator("base_income", "actual_ytd_commission")
    @classmethod
    def _validate_commission_precision(cls, value: float | None) -> float | None:
        return _check_precision(value)

    @property
    def base_amount(self) -> float:
        return self.base_income

    @property
    def actual_ytd_amount(self) -> float | None:
        return self.actual_ytd_commission


class AnnualIncomeRequest(_RequestModel, ABC):
    """Income assessed by comparing the current and prior financial years."""

    income_type: str
    verification_method: VerificationMethod | None = None

    @property
    @abstractmethod
    def current_amount(self) -> float:
        """Figure for the current financial year."""

    @property
    @abstractmethod
    def prior_amount(self) -> float | None:
        """Figure for the previous financial year, when supplied."""


class BonusRequest(AnnualIncomeRequest):
    income_type: Literal["BONUS"]
    current_fy_bonus: StrictFloat = Field(..., ge=0)
    last_fy_bonus: StrictFloat | None = Field(default=None, ge=0)

    @field_validator("current_fy_bonus", "last_fy_bonus")
    @classmethod
    def _validate_precision(cls, value: float | None) -> float | None:
        return _check_precision(value)

    @property
    def current_amount(self) -> float:
        return self.current_fy_bonus

    @property
    def prior_amount(self) -> float | None:
        return self.last_fy_bonus


class InvestmentRequest(AnnualIncomeRequest):
    income_type: Literal["INVESTMENT_SHARES", "INVESTMENT_INTEREST"]
    current_fy: StrictFloat = Field(..., ge=0)
    last_fy: StrictFloat = Field(..., ge=0)

    @field_validator("current_fy", "last_fy")
    @classmethod
    def _validate_precision(cls, value: float) -> float:
        return _check_precision(value)

    @property
    def current_amount(self) -> float:
        return self.current_fy

    @property
    def prior_amount(self) -> float | None:
        return self.last_fy


IncomeRequest = Annotated[
    Union[
        OvertimeRequest,
        CasualRequest,
        ContractVariableRequest,
        CommissionsRequest,
        BonusRequest,
        InvestmentRequest,
    ],
    Field(discriminator="income_type"),
]

_INCOME_REQUEST_ADAPTER: TypeAdapter[Any] = TypeAdapter(IncomeRequest)


def parse_income_request(payload: Any) -> EmploymentIncomeRequest | AnnualIncomeRequest:
    """Validate ``payload`` against the tagged request union."""

    return _INCOME_REQUEST_ADAPTER.validate_python(payload)

