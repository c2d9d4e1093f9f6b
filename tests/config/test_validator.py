from pathlib import Path

import yaml

from ethiosalary.backend.config.payroll_config import (
    CONFIG_FILE,
    PayrollConfiguration,
    load_payroll_configuration,
)
from ethiosalary.backend.config.validator import (
    main,
    validate_file,
    validate_payroll_configuration,
)


def _raw_config() -> dict:
    return yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8"))


def test_bundled_configuration_is_valid() -> None:
    issues = validate_payroll_configuration(load_payroll_configuration())
    assert issues == []


def test_validator_flags_deductible_discontinuity() -> None:
    data = _raw_config()
    data["tax_brackets"][2]["deductible"] = 450

    errors = validate_payroll_configuration(PayrollConfiguration.model_validate(data))

    assert any("tax_brackets[2]" in error and "continuity" in error for error in errors)


def test_validator_flags_gap_between_brackets() -> None:
    data = _raw_config()
    data["tax_brackets"][1]["min"] = 2500

    errors = validate_payroll_configuration(PayrollConfiguration.model_validate(data))

    assert any("should start at 2001" in error for error in errors)


def test_validator_flags_decreasing_rates() -> None:
    data = _raw_config()
    data["tax_brackets"][3]["rate"] = 0.1

    errors = validate_payroll_configuration(PayrollConfiguration.model_validate(data))

    assert any("must not decrease" in error for error in errors)


def test_validator_flags_overtime_discount() -> None:
    data = _raw_config()
    data["overtime"]["multipliers"]["standard"] = 0.5

    errors = validate_payroll_configuration(PayrollConfiguration.model_validate(data))

    assert "overtime.multipliers.standard: premium must be at least 1.0" in errors


def test_validator_flags_malformed_exchange_rates() -> None:
    data = _raw_config()
    data["currency"]["exchange_rates"] = {"US$": 0.018, "ETB": 1.0, "EUR": 0}

    errors = validate_payroll_configuration(PayrollConfiguration.model_validate(data))

    assert any("US$" in error and "three letters" in error for error in errors)
    assert any("home currency" in error for error in errors)
    assert any("EUR" in error and "positive" in error for error in errors)


def test_validate_file_reports_schema_errors(tmp_path: Path) -> None:
    data = _raw_config()
    del data["pension"]
    path = tmp_path / "broken.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")

    errors = validate_file(path)

    assert len(errors) == 1
    assert errors[0].startswith("broken.yaml:")
    assert "pension" in errors[0]


def test_main_reports_exit_codes(tmp_path: Path, capsys) -> None:
    assert main([]) == 0
    assert "OK" in capsys.readouterr().out

    data = _raw_config()
    data["solver"]["tolerance"] = 200000
    path = tmp_path / "payroll.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")

    assert main([str(path)]) == 1
    output = capsys.readouterr().out
    assert "1 issue(s) detected" in output
    assert "tolerance must be below the upper bound" in output


def test_validator_flags_rates_above_statutory_maximum() -> None:
    data = _raw_config()
    data["tax_brackets"][-1]["rate"] = 0.4

    errors = validate_payroll_configuration(PayrollConfiguration.model_validate(data))

    assert "tax_brackets[5]: rate must lie between 0 and 0.35" in errors
