"""Utilities for validating engine configuration data and surfacing issues."""

from __future__ import annotations

import argparse
from collections import Counter
from typing import Mapping, Sequence

from .engine_config import (
    AnnualIncomeConfig,
    BusinessRules,
    CalculationConfig,
    ConfigurationError,
    EngineConfiguration,
    load_engine_configuration,
)
from .schema import VERIFICATION_METHODS

# Only commissions expose a directly verified year-to-date figure.
_ACTUAL_YTD_TYPES = frozenset({"COMMISSIONS"})


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_business_rules(rules: BusinessRules) -> list[str]:
    errors: list[str] = []
    scope = "business_rules"

    for frequency, multiplier in rules.frequency_multipliers.items():
        if multiplier <= 0:
            errors.append(
                _format_scope(
                    scope,
                    f"frequency multiplier for {frequency} must be a positive integer",
                )
            )

    duplicates = [
        value
        for value, count in Counter(rules.frequency_multipliers.values()).items()
        if count > 1
    ]
    if duplicates:
        errors.append(
            _format_scope(
                scope,
                f"duplicate frequency multipliers detected: {sorted(duplicates)}",
            )
        )

    threshold = rules.monthly_rounding_threshold
    if threshold < 0 or threshold >= 1:
        errors.append(
            _format_scope(scope, "monthly rounding threshold must be within [0, 1)")
        )

    if rules.days_in_year not in {365, 366}:
        errors.append(
            _format_scope(scope, f"unexpected days_in_year value {rules.days_in_year}")
        )

    return errors


def _validate_verification_methods(scope: str, methods: Sequence[str]) -> list[str]:
    errors: list[str] = []
    unknown = [method for method in methods if method not in VERIFICATION_METHODS]
    if unknown:
        errors.append(
            _format_scope(scope, f"unknown verification methods: {', '.join(unknown)}")
        )
    if len(set(methods)) != len(methods):
        errors.append(_format_scope(scope, "verification methods must not repeat"))
    return errors


def _validate_calculation_config(income_type: str, config: CalculationConfig) -> list[str]:
    scope = f"employment_income.{income_type}"
    errors: list[str] = []

    tiers = list(config.priority_tiers)
    if tiers[-1] != "calculated":
        errors.append(
            _format_scope(scope, "the 'calculated' tier must close the priority list")
        )

    if "actualYtd" in tiers and income_type not in _ACTUAL_YTD_TYPES:
        errors.append(
            _format_scope(
                scope,
                "the 'actualYtd' tier is only supported for commission income",
            )
        )

    errors.extend(_validate_verification_methods(scope, config.verification_methods))
    return errors


def _validate_annual_config(income_type: str, config: AnnualIncomeConfig) -> list[str]:
    scope = f"annual_income.{income_type}"
    return _validate_verification_methods(scope, config.verification_methods)


def validate_engine_configuration(config: EngineConfiguration) -> list[str]:
    """Return a list of validation issues detected for ``config``."""

    errors: list[str] = []

    errors.extend(_validate_business_rules(config.business_rules))

    sections: Mapping[str, CalculationConfig] = config.employment_income
    for income_type, calculation in sections.items():
        errors.extend(_validate_calculation_config(income_type, calculation))

    for income_type, annual in config.annual_income.items():
        errors.extend(_validate_annual_config(income_type, annual))

    return errors


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Validate the income calculation engine configuration and report issues."
        )
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only print output when issues are detected",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    try:
        config = load_engine_configuration()
    except (FileNotFoundError, ConfigurationError) as error:
        print(f"failed to load configuration: {error}")
        return 1

    issues = validate_engine_configuration(config)
    if issues:
        print(f"{len(issues)} issue(s) detected:")
        for issue in issues:
            print(f"  - {issue}")
        return 1

    if not args.quiet:
        types = ", ".join(config.income_types)
        print(f"OK ({types})")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
