"""Service-layer helpers for the income calculation backend."""

from uncertainincome.backend.app.services.calculation_service import (
    calculate_uncertain_income,
)

from .request_parser import parse_calculation_payload
from .response_builder import build_calculation_response

__all__ = [
    "build_calculation_response",
    "calculate_uncertain_income",
    "parse_calculation_payload",
]
