"""Orchestrate request validation and the income calculation engine.

The calculation service turns a raw JSON mapping into a validated request model,
runs the engine against the cached configuration and shapes the success
payload returned to clients. Schema problems surface as
:class:`~.errors.InvalidInputError` and business rule violations as
:class:`~.errors.BusinessRuleError`; the HTTP layer maps both to responses.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from datetime import date
from time import perf_counter
from typing import Any

from pydantic import ValidationError

from uncertainincome.backend.app.models import IncomeResult, parse_income_request
from uncertainincome.backend.config.engine_config import (
    EngineConfiguration,
    load_engine_configuration,
)
from uncertainincome.backend.logging_config import LogContext

from .calculators import calculate_income
from .errors import ErrorCode, ErrorDetail, InvalidInputError

_LOGGER = logging.getLogger(__name__)

PROFILE_ENV = "UNCERTAIN_INCOME_PROFILE_CALCULATIONS"


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv(PROFILE_ENV, "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def parse_request(payload: Any):
    """Validate ``payload`` and return the matching request model."""

    if not isinstance(payload, Mapping):
        raise InvalidInputError(
            "Request body must be a JSON object",
            (
                ErrorDetail(
                    field="body",
                    code=ErrorCode.INVALID_DATA_TYPE.value,
                    message="Request body must be a JSON object",
                    path="$",
                ),
            ),
        )
    try:
        return parse_income_request(dict(payload))
    except ValidationError as exc:
        raise InvalidInputError.from_validation_error(exc) from exc


def build_success_payload(
    request: Any,
    result: IncomeResult,
    config: EngineConfiguration,
) -> dict[str, Any]:
    """Shape the success envelope returned for a completed calculation."""

    data: dict[str, Any] = {"incomeType": request.income_type}
    if request.verification_method is not None:
        data["verificationMethod"] = request.verification_method.value
    data.update(
        {
            "allowableAnnualIncome": result.allowable_annual_income,
            "calculationDetails": result.calculation_details.as_dict(),
            "eligible": result.eligible,
        }
    )
    return {
        "success": True,
        "data": data,
        "versions": {
            "api": config.meta.api_version,
            "logic": config.meta.logic_version,
        },
    }


def calculate_uncertain_income(
    payload: Mapping[str, Any] | Any,
    *,
    today: date | None = None,
    config: EngineConfiguration | None = None,
) -> dict[str, Any]:
    """Compute the allowable annual income for ``payload``."""

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    engine = config or load_engine_configuration()

    with _profile_section("parse_request", timings):
        request_model = parse_request(payload)

    tokens = LogContext.set(income_type=request_model.income_type)
    try:
        _LOGGER.info("Calculating allowable income")

        with _profile_section("calculate_income", timings):
            result = calculate_income(request_model, engine, today=today)

        if timings is not None and overall_start is not None:
            timings["total"] = perf_counter() - overall_start
            _LOGGER.debug(
                "calculate_uncertain_income timings (ms): %s",
                {name: round(duration * 1000, 3) for name, duration in timings.items()},
            )

        _LOGGER.info(
            "Calculation complete",
            extra={
                "allowable_annual_income": result.allowable_annual_income,
                "eligible": result.eligible,
            },
        )
    finally:
        LogContext.reset(tokens)

    return build_success_payload(request_model, result, engine)


__all__ = [
    "PROFILE_ENV",
    "build_success_payload",
    "calculate_uncertain_income",
    "parse_request",
]
