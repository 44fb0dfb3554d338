"""Integration coverage for configuration metadata endpoints."""

from http import HTTPStatus

from flask.testing import FlaskClient

from uncertainincome.backend.version import get_version_info


def test_meta_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/meta")

    assert response.status_code == HTTPStatus.OK
    assert response.get_json() == get_version_info().as_dict()


def test_income_types_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/income-types")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["salary_frequencies"] == ["FORTNIGHTLY", "MONTHLY", "WEEKLY"]

    entries = {entry["income_type"]: entry for entry in payload["income_types"]}
    assert set(entries) == {
        "OVERTIME",
        "CASUAL",
        "CONTRACT_VARIABLE",
        "COMMISSIONS",
        "BONUS",
        "INVESTMENT_SHARES",
        "INVESTMENT_INTEREST",
    }

    overtime = entries["OVERTIME"]
    assert overtime["family"] == "employment"
    assert overtime["has_base_income"] is True
    assert overtime["verification_required"] is True
    assert overtime["verification_methods"] == [
        "NON_ESSENTIAL_SERVICES",
        "ESSENTIAL_SERVICES",
    ]
    assert overtime["rolling_window_months"] == 6
    assert overtime["minimum_employment_days"] == 180

    commissions = entries["COMMISSIONS"]
    assert commissions["priority_tiers"] == ["actualYtd", "override", "calculated"]
    assert commissions["last_fy_required_months"] == 12

    casual = entries["CASUAL"]
    assert casual["verification_required"] is False
    assert casual["has_base_income"] is False

    bonus = entries["BONUS"]
    assert bonus["family"] == "annual"
    assert bonus["two_year_methods"] == ["TWO_YEAR_VERIFICATION"]
    assert entries["INVESTMENT_SHARES"]["verification_methods"] == []
