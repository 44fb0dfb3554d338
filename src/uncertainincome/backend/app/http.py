"""HTTP helper utilities shared across Flask blueprints."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Sequence

from flask import g, has_request_context, jsonify

from uncertainincome.backend.app.services.errors import ErrorCode, ErrorDetail

REQUEST_ID_HEADER = "X-Request-ID"


def new_request_id() -> str:
    return uuid.uuid4().hex


def current_request_id() -> str:
    """Return the id bound to the active request, minting one if needed."""

    if has_request_context():
        request_id = getattr(g, "request_id", None)
        if not request_id:
            request_id = new_request_id()
            g.request_id = request_id
        return request_id
    return new_request_id()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class ErrorResponse:
    """Failure envelope returned for every unsuccessful request."""

    errors: Sequence[ErrorDetail]
    status: int
    request_id: str = field(default_factory=current_request_id)
    timestamp: str = field(default_factory=_timestamp)

    def as_dict(self) -> dict[str, Any]:
        """Return the serialisable payload for this error response."""

        return {
            "success": False,
            "errors": [error.as_dict() for error in self.errors],
            "timestamp": self.timestamp,
            "requestId": self.request_id,
        }

    def to_response(self) -> tuple[Any, int]:
        """Convert the payload into a Flask response tuple."""

        return jsonify(self.as_dict()), self.status


def error_response(
    errors: Sequence[ErrorDetail],
    *,
    status: int,
) -> ErrorResponse:
    return ErrorResponse(errors=tuple(errors), status=status)


def single_error_response(
    code: ErrorCode,
    message: str,
    *,
    status: int,
    field_name: str = "general",
    value: Any = None,
) -> ErrorResponse:
    """Convenience factory for responses carrying a single error entry."""

    detail = ErrorDetail(
        field=field_name,
        code=code.value,
        message=message,
        value=value,
        path="$" if field_name in {"general", "body"} else f"$.{field_name}",
    )
    return error_response((detail,), status=status)


__all__ = [
    "ErrorResponse",
    "REQUEST_ID_HEADER",
    "current_request_id",
    "error_response",
    "new_request_id",
    "single_error_response",
]
