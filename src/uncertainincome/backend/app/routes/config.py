"""Expose configuration metadata consumed by form builders and monitoring.

These endpoints surface the YAML-backed engine configuration so that clients
can populate income type pickers, verification method options and the fields
required per type without duplicating business rules.
"""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify

from uncertainincome.backend.config.engine_config import (
    AnnualIncomeConfig,
    CalculationConfig,
    load_engine_configuration,
)
from uncertainincome.backend.version import get_version_info

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime version metadata derived from the engine configuration."""

    return get_version_info().as_dict()


def _serialise_employment_type(
    income_type: str, config: CalculationConfig, minimum_days: int
) -> dict[str, Any]:
    return {
        "income_type": income_type,
        "family": "employment",
        "has_base_income": config.has_base_income,
        "verification_methods": list(config.verification_methods),
        "verification_required": bool(config.verification_methods),
        "priority_tiers": list(config.priority_tiers),
        "rolling_window_months": config.rolling_window_months,
        "last_fy_required_months": config.last_fy_required_months,
        "minimum_employment_days": minimum_days,
    }


def _serialise_annual_type(income_type: str, config: AnnualIncomeConfig) -> dict[str, Any]:
    return {
        "income_type": income_type,
        "family": "annual",
        "verification_methods": list(config.verification_methods),
        "verification_required": bool(config.verification_methods),
        "two_year_methods": list(config.two_year_methods),
    }


@blueprint.get("/income-types")
def list_income_types() -> Any:
    """Return the configured income types and their calculation settings."""

    configuration = load_engine_configuration()
    minimum_days = configuration.business_rules.minimum_employment_days

    income_types: list[dict[str, Any]] = [
        _serialise_employment_type(income_type, config, minimum_days)
        for income_type, config in configuration.employment_income.items()
    ]
    income_types.extend(
        _serialise_annual_type(income_type, config)
        for income_type, config in configuration.annual_income.items()
    )

    return jsonify(
        {
            "income_types": income_types,
            "salary_frequencies": sorted(
                configuration.business_rules.frequency_multipliers
            ),
        }
    )


@blueprint.get("/meta")
def get_meta() -> Any:
    """Return version metadata for the running service."""

    return jsonify(get_configuration_metadata())
