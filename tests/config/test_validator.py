from uncertainincome.backend.config.engine_config import load_engine_configuration
from uncertainincome.backend.config.validator import main, validate_engine_configuration


def test_current_configuration_is_valid() -> None:
    config = load_engine_configuration()

    assert validate_engine_configuration(config) == []


def test_validator_flags_duplicate_frequency_multipliers() -> None:
    config = load_engine_configuration()
    rules = config.business_rules.model_copy(
        update={"frequency_multipliers": {"WEEKLY": 52, "FORTNIGHTLY": 26, "MONTHLY": 26}}
    )
    broken = config.model_copy(update={"business_rules": rules})

    errors = validate_engine_configuration(broken)

    assert any("duplicate frequency multipliers" in error for error in errors)


def test_validator_flags_rounding_threshold_out_of_range() -> None:
    config = load_engine_configuration()
    rules = config.business_rules.model_copy(update={"monthly_rounding_threshold": 1.5})
    broken = config.model_copy(update={"business_rules": rules})

    errors = validate_engine_configuration(broken)

    assert any("rounding threshold" in error for error in errors)


def test_validator_flags_tier_order_and_actual_ytd_scope() -> None:
    config = load_engine_configuration()
    overtime = config.calculation_config("OVERTIME").model_copy(
        update={"priority_tiers": ("calculated", "actualYtd")}
    )
    broken = config.model_copy(
        update={"employment_income": {**config.employment_income, "OVERTIME": overtime}}
    )

    errors = validate_engine_configuration(broken)

    assert any(
        "employment_income.OVERTIME" in error and "close the priority list" in error
        for error in errors
    )
    assert any("only supported for commission income" in error for error in errors)


def test_validator_flags_unknown_verification_methods() -> None:
    config = load_engine_configuration()
    bonus = config.annual_config("BONUS").model_copy(
        update={"verification_methods": ("ONE_YEAR_VERIFICATION", "PAYSLIP_ONLY")}
    )
    broken = config.model_copy(
        update={"annual_income": {**config.annual_income, "BONUS": bonus}}
    )

    errors = validate_engine_configuration(broken)

    assert errors == ["annual_income.BONUS: unknown verification methods: PAYSLIP_ONLY"]


def test_main_reports_success(capsys) -> None:
    assert main([]) == 0
    assert capsys.readouterr().out.startswith("OK (OVERTIME, CASUAL")

    assert main(["--quiet"]) == 0
    assert capsys.readouterr().out == ""
