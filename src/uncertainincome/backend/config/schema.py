"""Pydantic models describing the calculation engine configuration schema."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)

PRIORITY_TIERS: tuple[str, ...] = ("actualYtd", "override", "calculated")
SALARY_FREQUENCIES: tuple[str, ...] = ("WEEKLY", "FORTNIGHTLY", "MONTHLY")
VERIFICATION_METHODS: tuple[str, ...] = (
    "NON_ESSENTIAL_SERVICES",
    "ESSENTIAL_SERVICES",
    "ONE_YEAR_VERIFICATION",
    "TWO_YEAR_VERIFICATION",
)
SUPPORTED_WINDOWS: tuple[int, ...] = (6, 12)


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


def _coerce_string_tuple(value: Any, label: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise ConfigurationError(f"'{label}' must be provided as a list")
    return tuple(str(entry).strip() for entry in value)


class EngineMeta(ImmutableModel):
    """Version stamps reported alongside every calculation."""

    api_version: str
    logic_version: str

    @field_validator("api_version", "logic_version", mode="before")
    @classmethod
    def _coerce_version(cls, value: Any) -> str:
        text = str(value).strip() if value is not None else ""
        if not text:
            raise ConfigurationError("Version stamps must be non-empty strings")
        return text


class BusinessRules(ImmutableModel):
    """Constants shared by every employment-based calculation."""

    minimum_employment_days: int = 180
    days_in_year: int = 365
    monthly_rounding_threshold: float = 0.25
    frequency_multipliers: Mapping[str, int]

    @field_validator("frequency_multipliers", mode="before")
    @classmethod
    def _coerce_multipliers(cls, value: Any) -> Mapping[str, int]:
        if isinstance(value, Mapping):
            return {str(key).upper(): int(val) for key, val in value.items()}
        raise ConfigurationError("'frequency_multipliers' must be a mapping")

    @model_validator(mode="after")
    def _validate_values(self) -> BusinessRules:
        if self.minimum_employment_days < 0:
            raise ConfigurationError("'minimum_employment_days' must be non-negative")
        if self.days_in_year <= 0:
            raise ConfigurationError("'days_in_year' must be positive")
        missing = [
            frequency
            for frequency in SALARY_FREQUENCIES
            if frequency not in self.frequency_multipliers
        ]
        if missing:
            raise ConfigurationError(
                f"Frequency multipliers missing for: {', '.join(missing)}"
            )
        return self

    def multiplier_for(self, frequency: str) -> int:
        try:
            return self.frequency_multipliers[frequency]
        except KeyError:
            raise RuntimeError(f"Invalid salary frequency: {frequency}") from None


class CalculationConfig(ImmutableModel):
    """Parameters driving the shared employment-based calculation."""

    has_base_income: bool
    last_fy_required_months: int
    priority_tiers: Sequence[str]
    rolling_window_months: int | None = None
    verification_methods: Sequence[str] = Field(default_factory=tuple)

    @field_validator("priority_tiers", mode="before")
    @classmethod
    def _coerce_tiers(cls, value: Any) -> Sequence[str]:
        return _coerce_string_tuple(value, "priority_tiers")

    @field_validator("verification_methods", mode="before")
    @classmethod
    def _coerce_methods(cls, value: Any) -> Sequence[str]:
        return _coerce_string_tuple(value, "verification_methods")

    @model_validator(mode="after")
    def _validate_values(self) -> CalculationConfig:
        if self.last_fy_required_months not in SUPPORTED_WINDOWS:
            raise ConfigurationError(
                "'last_fy_required_months' must be one of "
                f"{', '.join(str(entry) for entry in SUPPORTED_WINDOWS)}"
            )
        if (
            self.rolling_window_months is not None
            and self.rolling_window_months not in SUPPORTED_WINDOWS
        ):
            raise ConfigurationError(
                "'rolling_window_months' must be one of "
                f"{', '.join(str(entry) for entry in SUPPORTED_WINDOWS)} when provided"
            )
        if not self.priority_tiers:
            raise ConfigurationError("At least one priority tier must be configured")
        unknown = [tier for tier in self.priority_tiers if tier not in PRIORITY_TIERS]
        if unknown:
            raise ConfigurationError(f"Unknown priority tiers: {', '.join(unknown)}")
        if len(set(self.priority_tiers)) != len(self.priority_tiers):
            raise ConfigurationError("Priority tiers must not repeat")
        return self


class AnnualIncomeConfig(ImmutableModel):
    """Settings for income types assessed by comparing financial years."""

    verification_methods: Sequence[str] = Field(default_factory=tuple)
    two_year_methods: Sequence[str] = Field(default_factory=tuple)

    @field_validator("verification_methods", "two_year_methods", mode="before")
    @classmethod
    def _coerce_methods(cls, value: Any) -> Sequence[str]:
        return _coerce_string_tuple(value, "verification_methods")

    @model_validator(mode="after")
    def _validate_methods(self) -> AnnualIncomeConfig:
        stray = [
            method
            for method in self.two_year_methods
            if method not in self.verification_methods
        ]
        if stray:
            raise ConfigurationError(
                "'two_year_methods' must be a subset of 'verification_methods'"
            )
        return self

    def averages_years(self, verification_method: str | None) -> bool:
        """Return ``True`` when the two-year conservative average applies."""

        if not self.two_year_methods:
            return True
        return verification_method in self.two_year_methods


class EngineConfiguration(ImmutableModel):
    """Complete configuration for the income calculation engine."""

    meta: EngineMeta
    business_rules: BusinessRules
    employment_income: Mapping[str, CalculationConfig]
    annual_income: Mapping[str, AnnualIncomeConfig]

    @field_validator("employment_income", "annual_income", mode="before")
    @classmethod
    def _coerce_sections(cls, value: Any) -> Mapping[str, Any]:
        if isinstance(value, Mapping):
            return {str(key).upper(): entry for key, entry in value.items()}
        raise ConfigurationError("Income type sections must be mappings")

    @model_validator(mode="after")
    def _validate_sections(self) -> EngineConfiguration:
        overlap = set(self.employment_income) & set(self.annual_income)
        if overlap:
            raise ConfigurationError(
                "Income types declared in both sections: "
                f"{', '.join(sorted(overlap))}"
            )
        return self

    @computed_field
    @property
    def income_types(self) -> tuple[str, ...]:
        return tuple(self.employment_income) + tuple(self.annual_income)

    def calculation_config(self, income_type: str) -> CalculationConfig:
        try:
            return self.employment_income[income_type]
        except KeyError:
            raise KeyError(
                f"No employment-based calculation configured for {income_type}"
            ) from None

    def annual_config(self, income_type: str) -> AnnualIncomeConfig:
        try:
            return self.annual_income[income_type]
        except KeyError:
            raise KeyError(
                f"No annual income calculation configured for {income_type}"
            ) from None

    def verification_methods_for(self, income_type: str) -> tuple[str, ...]:
        if income_type in self.employment_income:
            return tuple(self.employment_income[income_type].verification_methods)
        if income_type in self.annual_income:
            return tuple(self.annual_income[income_type].verification_methods)
        raise KeyError(f"Unknown income type: {income_type}")


__all__ = [
    "AnnualIncomeConfig",
    "BusinessRules",
    "CalculationConfig",
    "ConfigurationError",
    "EngineConfiguration",
    "EngineMeta",
    "ImmutableModel",
    "PRIORITY_TIERS",
    "SALARY_FREQUENCIES",
    "SUPPORTED_WINDOWS",
    "VERIFICATION_METHODS",
    "ValidationError",
]
