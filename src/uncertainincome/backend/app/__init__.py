"""Application factory for the uncertain income calculation service."""

import logging
import os
from http import HTTPStatus

from flask import Flask, g, jsonify, request
from flask.typing import ResponseReturnValue
from flask_cors import CORS
from werkzeug.exceptions import BadRequest, HTTPException

from uncertainincome.backend.config.engine_config import (
    ConfigurationError,
    load_engine_configuration,
)
from uncertainincome.backend.logging_config import LogContext, configure_logging

from .http import (
    REQUEST_ID_HEADER,
    current_request_id,
    error_response,
    single_error_response,
)
from .routes import register_routes
from .routes.config import get_configuration_metadata
from .services.errors import BusinessRuleError, ErrorCode, InvalidInputError

_LOGGER = logging.getLogger(__name__)

ALLOWED_ORIGINS_ENV = "UNCERTAIN_INCOME_ALLOWED_ORIGINS"
_MAX_REQUEST_ID_LENGTH = 128


def _parse_allowed_origins(raw: str | None) -> list[str] | str:
    """Convert an environment variable into the origins accepted by Flask-Cors."""

    if raw is None:
        return "*"

    origins = sorted({origin.strip() for origin in raw.split(",") if origin.strip()})
    if not origins or "*" in origins:
        return "*"
    return origins


def _incoming_request_id() -> str | None:
    candidate = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if candidate and len(candidate) <= _MAX_REQUEST_ID_LENGTH:
        return candidate
    return None


def create_app() -> Flask:
    """Create and configure the Flask application instance."""

    configure_logging()
    # fail fast on a broken configuration rather than on the first request
    load_engine_configuration()

    app = Flask(__name__)
    allowed_origins = _parse_allowed_origins(os.getenv(ALLOWED_ORIGINS_ENV))

    CORS(
        app,
        resources={r"/api/*": {"origins": allowed_origins}},
        supports_credentials=False,
        methods=["GET", "OPTIONS", "POST"],
        allow_headers=["Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
        send_wildcard=allowed_origins == "*",
    )

    register_routes(app)

    @app.before_request
    def _bind_request_id() -> None:
        g.request_id = _incoming_request_id() or current_request_id()
        g.log_tokens = LogContext.set(request_id=g.request_id)
        _LOGGER.info(
            "Request received",
            extra={"method": request.method, "path": request.path},
        )

    @app.after_request
    def _attach_request_id(response):
        response.headers[REQUEST_ID_HEADER] = current_request_id()
        return response

    @app.teardown_request
    def _release_log_context(_error: BaseException | None) -> None:
        tokens = g.pop("log_tokens", None)
        if tokens:
            LogContext.reset(tokens)

    @app.route("/health", methods=["GET"])
    def health_check():
        """Simple health check endpoint for infrastructure monitoring."""

        payload = {"status": "ok", **get_configuration_metadata()}
        return jsonify(payload)

    @app.errorhandler(BadRequest)
    def handle_bad_request(error: BadRequest) -> ResponseReturnValue:
        """Return consistent JSON responses for malformed payloads."""

        message = error.description or "Invalid request"
        _LOGGER.warning("Malformed request body: %s", message)
        return single_error_response(
            ErrorCode.INVALID_JSON_SYNTAX,
            message,
            status=HTTPStatus.BAD_REQUEST,
            field_name="body",
        ).to_response()

    @app.errorhandler(BusinessRuleError)
    def handle_business_rule_error(error: BusinessRuleError) -> ResponseReturnValue:
        """Surface business rule violations as unprocessable entities."""

        _LOGGER.info("Business rule violation", extra={"codes": list(error.codes)})
        return error_response(
            error.errors, status=HTTPStatus.UNPROCESSABLE_ENTITY
        ).to_response()

    @app.errorhandler(InvalidInputError)
    def handle_invalid_input(error: InvalidInputError) -> ResponseReturnValue:
        """Gracefully surface schema validation errors to clients."""

        _LOGGER.info("Request validation failed", extra={"codes": list(error.codes)})
        return error_response(error.errors, status=HTTPStatus.BAD_REQUEST).to_response()

    @app.errorhandler(ConfigurationError)
    def handle_configuration_error(error: ConfigurationError) -> ResponseReturnValue:
        _LOGGER.error("Engine configuration error: %s", error)
        return single_error_response(
            ErrorCode.CONFIGURATION_ERROR,
            "Calculation engine configuration is invalid",
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
        ).to_response()

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception) -> ResponseReturnValue:
        if isinstance(error, HTTPException):
            return error

        _LOGGER.exception("Unhandled error while processing request")
        return single_error_response(
            ErrorCode.INTERNAL_SERVER_ERROR,
            "An unexpected error occurred",
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
        ).to_response()

    return app


__all__ = ["ALLOWED_ORIGINS_ENV", "create_app"]
