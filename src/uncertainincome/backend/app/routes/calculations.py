"""REST endpoints for income calculations."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from uncertainincome.backend.services import (
    build_calculation_response,
    calculate_uncertain_income,
    parse_calculation_payload,
)

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1")


@blueprint.post("/uncertain-income")
def create_calculation() -> tuple[Any, int]:
    """Calculate the allowable annual income for the submitted JSON payload."""

    payload = parse_calculation_payload(request)
    result = calculate_uncertain_income(payload)

    return build_calculation_response(result)
