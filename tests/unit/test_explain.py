"""Unit tests for the calculation breakdown helpers."""

from __future__ import annotations

import importlib.util
import json
from datetime import date
from pathlib import Path
from typing import Any

import pytest

from uncertainincome.backend.app.services.explain import (
    explain_request,
    format_explanation,
)

TODAY = date(2025, 6, 30)


def test_employment_breakdown_lists_rolling_window(
    overtime_payload: dict[str, Any],
) -> None:
    explanation = explain_request(overtime_payload, today=TODAY)

    assert explanation["result"]["allowableAnnualIncome"] == 177000.0

    breakdown = explanation["breakdown"]
    assert breakdown["financialYear"] == {"start": "2024-07-01", "end": "2025-06-30"}
    assert breakdown["payCycles"] == {
        "periodStart": "2024-07-01",
        "periodEnd": "2024-12-01",
        "days": 153,
        "daysInYear": 365,
        "frequencyMultiplier": 12,
        "count": 5,
    }
    assert breakdown["employmentDays"] == 335
    assert breakdown["priorityTiers"] == ["override", "calculated"]

    window = breakdown["rollingWindow"]
    assert window["months"] == 6
    assert [entry["month"] for entry in window["entries"]] == [
        "2024-06",
        "2024-07",
        "2024-08",
        "2024-09",
        "2024-10",
        "2024-11",
    ]
    assert window["entries"][0] == {"month": "2024-06", "currentFy": False, "amount": 10500.0}


def test_ineligible_breakdown_reports_duration() -> None:
    explanation = explain_request(
        {
            "incomeType": "CASUAL",
            "salaryFrequency": "WEEKLY",
            "endDateLatestPayslip": "2025-02-01",
            "employmentStartDate": "2024-09-01",
            "ytdAmountLatestPayslip": 5000,
        },
        today=TODAY,
    )

    assert explanation["result"]["eligible"] is False
    assert explanation["breakdown"] == {
        "employmentDays": 153,
        "minimumEmploymentDays": 180,
    }


def test_annual_breakdown_reports_both_years() -> None:
    explanation = explain_request(
        {
            "incomeType": "BONUS",
            "verificationMethod": "TWO_YEAR_VERIFICATION",
            "currentFyBonus": 30000,
            "lastFyBonus": 60000,
        },
        today=TODAY,
    )

    assert explanation["result"]["allowableAnnualIncome"] == 30000
    assert explanation["breakdown"] == {
        "currentAmount": 30000,
        "priorAmount": 60000,
        "twoYearAverage": True,
    }


def test_format_explanation_indents_nested_sections() -> None:
    text = format_explanation(
        {
            "result": {"allowableAnnualIncome": 1000.0},
            "breakdown": {"entries": [{"month": "2024-06"}]},
        }
    )

    assert text.splitlines() == [
        "result:",
        "  allowableAnnualIncome: 1000.0",
        "breakdown:",
        "  entries:",
        "    [1]:",
        "      month: 2024-06",
    ]


def _load_cli():
    path = Path(__file__).resolve().parents[2] / "scripts" / "explain_calculation.py"
    spec = importlib.util.spec_from_file_location("explain_calculation", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_cli_prints_breakdown(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], overtime_payload: dict[str, Any]
) -> None:
    payload_path = tmp_path / "payload.json"
    payload_path.write_text(json.dumps(overtime_payload), encoding="utf-8")

    exit_code = _load_cli().main([str(payload_path), "--today", "2025-06-30", "--json"])

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["result"]["allowableAnnualIncome"] == 177000.0


def test_cli_reports_rejected_requests(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    payload_path = tmp_path / "payload.json"
    payload_path.write_text(json.dumps({"incomeType": "BONUS"}), encoding="utf-8")

    exit_code = _load_cli().main([str(payload_path)])

    assert exit_code == 1
    assert "[MISSING_REQUIRED_FIELD] currentFyBonus" in capsys.readouterr().out
