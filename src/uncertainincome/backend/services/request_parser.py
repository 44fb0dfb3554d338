"""Helpers for extracting incoming calculation requests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import Request
from werkzeug.exceptions import BadRequest


def parse_calculation_payload(req: Request) -> dict[str, Any]:
    """Extract the JSON object submitted with ``req``.

    Malformed JSON and non-object bodies raise :class:`BadRequest`, which the
    application maps to an ``INVALID_JSON_SYNTAX`` error response.
    """

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")

    return dict(data)
