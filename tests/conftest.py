"""Test configuration utilities and shared fixtures."""

import sys
from datetime import date
from pathlib import Path

# Make ``src`` importable when tests run without an editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from uncertainincome.backend.app import create_app  # noqa: E402
from uncertainincome.backend.config.engine_config import (  # noqa: E402
    EngineConfiguration,
    load_engine_configuration,
)
from uncertainincome.backend.logging_config import LogContext, reset_logging  # noqa: E402

# Reference date for business rule checks; every fixture date lies before it.
TODAY = date(2025, 6, 30)


@pytest.fixture(autouse=True)
def _isolate_logging():
    """Undo logger configuration performed by the application factory."""

    yield
    reset_logging()
    LogContext.clear()


@pytest.fixture()
def today() -> date:
    return TODAY


@pytest.fixture()
def engine_config() -> EngineConfiguration:
    return load_engine_configuration()


@pytest.fixture()
def app() -> Flask:
    """Return a configured Flask application for integration tests."""

    application = create_app()
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Provide a test client bound to the configured Flask app."""

    return app.test_client()


@pytest.fixture()
def overtime_payload() -> dict[str, object]:
    """Overtime request with a rolling window straddling the financial year."""

    return {
        "incomeType": "OVERTIME",
        "verificationMethod": "NON_ESSENTIAL_SERVICES",
        "salaryFrequency": "MONTHLY",
        "baseIncome": 2000,
        "endDateLatestPayslip": "2024-12-01",
        "employmentStartDate": "2024-01-01",
        "ytdAmountLatestPayslip": 88000,
        "lastFyAnnualIncome": 150000,
    }
