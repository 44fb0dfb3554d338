"""Error taxonomy shared by request validation and business rule checks.

Schema defects (missing fields, bad enums, malformed dates) surface as
:class:`InvalidInputError` and map to HTTP 400. Business rule violations are
:class:`BusinessRuleError` instances and map to HTTP 422. Both carry one or more
:class:`ErrorDetail` entries so transports can report every issue with a
stable ``code``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from pydantic import ValidationError


class ErrorCode(str, Enum):
    """Closed set of error codes reported to API consumers."""

    # Schema validation (HTTP 400)
    INVALID_JSON_SYNTAX = "INVALID_JSON_SYNTAX"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_DATA_TYPE = "INVALID_DATA_TYPE"
    INVALID_DATE_FORMAT = "INVALID_DATE_FORMAT"
    INVALID_ENUM_VALUE = "INVALID_ENUM_VALUE"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    INVALID_DECIMAL_PRECISION = "INVALID_DECIMAL_PRECISION"
    UNEXPECTED_FIELD = "UNEXPECTED_FIELD"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Business rules (HTTP 422)
    FUTURE_DATE = "FUTURE_DATE"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    MISSING_LAST_FY_INCOME = "MISSING_LAST_FY_INCOME"
    MISSING_LAST_FY_BONUS = "MISSING_LAST_FY_BONUS"
    INSUFFICIENT_EMPLOYMENT_DURATION = "INSUFFICIENT_EMPLOYMENT_DURATION"
    ZERO_PAY_CYCLES = "ZERO_PAY_CYCLES"
    NEGATIVE_CALCULATED_VALUE = "NEGATIVE_CALCULATED_VALUE"
    INVALID_COMBINATION = "INVALID_COMBINATION"

    # System (HTTP 500)
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


@dataclass(frozen=True)
class ErrorDetail:
    """Single validation issue returned to the caller."""

    field: str
    code: str
    message: str
    value: Any = None
    path: str = "$"

    def as_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "code": self.code,
            "message": self.message,
            "value": self.value,
            "path": self.path,
        }


# pydantic error types grouped by the code reported to clients
_PYDANTIC_CODE_MAP: dict[str, ErrorCode] = {
    "missing": ErrorCode.MISSING_REQUIRED_FIELD,
    "extra_forbidden": ErrorCode.UNEXPECTED_FIELD,
    "literal_error": ErrorCode.INVALID_ENUM_VALUE,
    "enum": ErrorCode.INVALID_ENUM_VALUE,
    "union_tag_invalid": ErrorCode.INVALID_ENUM_VALUE,
    "union_tag_not_found": ErrorCode.MISSING_REQUIRED_FIELD,
    "greater_than_equal": ErrorCode.OUT_OF_RANGE,
    "greater_than": ErrorCode.OUT_OF_RANGE,
    "less_than_equal": ErrorCode.OUT_OF_RANGE,
    "float_type": ErrorCode.INVALID_DATA_TYPE,
    "float_parsing": ErrorCode.INVALID_DATA_TYPE,
    "finite_number": ErrorCode.INVALID_DATA_TYPE,
    "string_type": ErrorCode.INVALID_DATA_TYPE,
    "model_type": ErrorCode.INVALID_DATA_TYPE,
    "model_attributes_type": ErrorCode.INVALID_DATA_TYPE,
    "dict_type": ErrorCode.INVALID_DATA_TYPE,
    "invalid_date_format": ErrorCode.INVALID_DATE_FORMAT,
    "invalid_decimal_precision": ErrorCode.INVALID_DECIMAL_PRECISION,
}

# union members prefix the location with their tag, e.g. ("OVERTIME", "baseIncome")
_TAG_NAMES = frozenset(
    {
        "OVERTIME",
        "CASUAL",
        "CONTRACT_VARIABLE",
        "COMMISSIONS",
        "BONUS",
        "INVESTMENT_SHARES",
        "INVESTMENT_INTEREST",
        "INVESTMENT_SHARES,INVESTMENT_INTEREST",
    }
)


def _issue_location(location: Iterable[Any]) -> list[str]:
    parts = [str(part) for part in location]
    if parts and parts[0] in _TAG_NAMES:
        parts = parts[1:]
    return parts


def _issue_message(error_type: str, field: str, issue: dict[str, Any]) -> str:
    message = issue.get("msg", "Invalid value")
    if error_type == "missing":
        return f"Required field '{field}' is missing or empty"
    if error_type == "extra_forbidden":
        return f"Field '{field}' is not allowed for this income type"
    if error_type in {"literal_error", "enum"}:
        return f"Invalid value '{issue.get('input')}' for field '{field}'. {message}"
    if error_type == "union_tag_invalid":
        tag = (issue.get("ctx") or {}).get("tag")
        return f"Invalid value '{tag}' for field 'incomeType'. {message}"
    if error_type == "union_tag_not_found":
        return "Required field 'incomeType' is missing or empty"
    return message


class InvalidInputError(ValueError):
    """Raised when a request cannot be processed because of invalid input."""

    def __init__(self, message: str, errors: Iterable[ErrorDetail] | None = None) -> None:
        super().__init__(message)
        self.message = message
        if errors is None:
            errors = (
                ErrorDetail(
                    field="general",
                    code=ErrorCode.VALIDATION_ERROR.value,
                    message=message,
                ),
            )
        self.errors: tuple[ErrorDetail, ...] = tuple(errors)

    @property
    def codes(self) -> tuple[str, ...]:
        return tuple(error.code for error in self.errors)

    @classmethod
    def from_validation_error(cls, error: ValidationError) -> InvalidInputError:
        """Translate pydantic validation issues into structured error details."""

        details: list[ErrorDetail] = []
        for issue in error.errors():
            error_type = str(issue.get("type", ""))
            parts = _issue_location(issue.get("loc", ()))
            if error_type == "union_tag_invalid" or error_type == "union_tag_not_found":
                parts = ["incomeType"]
            field = ".".join(parts) if parts else "general"
            code = _PYDANTIC_CODE_MAP.get(error_type, ErrorCode.VALIDATION_ERROR)
            value = issue.get("input") if error_type != "missing" else None
            if isinstance(value, (dict, list)):
                value = None
            details.append(
                ErrorDetail(
                    field=field,
                    code=code.value,
                    message=_issue_message(error_type, field, issue),
                    value=value,
                    path="$." + ".".join(parts) if parts else "$",
                )
            )

        summary = ", ".join(detail.message for detail in details) or str(error)
        return cls(f"Validation failed: {summary}", details)


class BusinessRuleError(InvalidInputError):
    """Raised when a request violates an eligibility business rule."""

    @classmethod
    def create_single(
        cls,
        field: str,
        code: ErrorCode,
        message: str,
        value: Any = None,
        path: str | None = None,
    ) -> BusinessRuleError:
        detail = ErrorDetail(
            field=field,
            code=code.value,
            message=message,
            value=value,
            path=path or f"$.{field}",
        )
        return cls(message, (detail,))

    @property
    def code(self) -> str:
        return self.errors[0].code

    @classmethod
    def future_date(cls, field: str, value: str) -> BusinessRuleError:
        return cls.create_single(
            field,
            ErrorCode.FUTURE_DATE,
            f"Date '{field}' cannot be in the future",
            value,
        )

    @classmethod
    def invalid_date_range(cls, end_date: str, start_date: str) -> BusinessRuleError:
        return cls.create_single(
            "endDateLatestPayslip",
            ErrorCode.INVALID_DATE_RANGE,
            f"End date on latest payslip ({end_date}) must be on or after "
            f"employment start date ({start_date})",
            end_date,
        )

    @classmethod
    def missing_last_fy_income(cls, days: int, required_months: int) -> BusinessRuleError:
        return cls.create_single(
            "lastFyAnnualIncome",
            ErrorCode.MISSING_LAST_FY_INCOME,
            "Last FY Annual Income required as end date on latest payslip is "
            f"{days} days into new financial year (less than {required_months} months)",
        )

    @classmethod
    def missing_last_fy_bonus(cls) -> BusinessRuleError:
        return cls.create_single(
            "lastFyBonus",
            ErrorCode.MISSING_LAST_FY_BONUS,
            "Last FY Bonus required for two-year verification method",
        )

    @classmethod
    def insufficient_employment_duration(
        cls, days: int, minimum_days: int = 180
    ) -> BusinessRuleError:
        return cls.create_single(
            "employmentDuration",
            ErrorCode.INSUFFICIENT_EMPLOYMENT_DURATION,
            f"Employment duration of {days} days is less than required {minimum_days} "
            "days. Annual override amount required for eligibility",
            days,
            "$.calculated.employmentDuration",
        )

    @classmethod
    def zero_pay_cycles(cls, end_date: str, start_date: str) -> BusinessRuleError:
        return cls.create_single(
            "payCycles",
            ErrorCode.ZERO_PAY_CYCLES,
            "Calculated pay cycles resulted in zero. Verify payslip date "
            f"({end_date}) is after employment start date ({start_date}) and within "
            "current financial year",
            0,
            "$.calculated.payCycles",
        )

    @classmethod
    def negative_calculated_value(
        cls, calculation_type: str, value: float
    ) -> BusinessRuleError:
        return cls.create_single(
            "calculatedValue",
            ErrorCode.NEGATIVE_CALCULATED_VALUE,
            f"Calculation error: {calculation_type} resulted in negative value. "
            "Check input data validity",
            value,
            f"$.calculated.{calculation_type}",
        )

    @classmethod
    def invalid_combination(
        cls, verification_method: str, income_type: str
    ) -> BusinessRuleError:
        return cls.create_single(
            "verificationMethod",
            ErrorCode.INVALID_COMBINATION,
            f"Verification method '{verification_method}' is not valid for income "
            f"type '{income_type}'",
            verification_method,
        )


__all__ = [
    "BusinessRuleError",
    "ErrorCode",
    "ErrorDetail",
    "InvalidInputError",
]
