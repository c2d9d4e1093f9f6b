"""Unit tests for loading the payroll configuration."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml

from ethiosalary.backend.config.payroll_config import (
    CONFIG_ENV_VAR,
    CONFIG_FILE,
    ConfigurationError,
    PayrollConfiguration,
    TaxBracket,
    load_payroll_configuration,
    resolve_config_path,
)


@pytest.fixture()
def isolated_loader():
    load_payroll_configuration.cache_clear()
    yield load_payroll_configuration
    load_payroll_configuration.cache_clear()


def _write_variant(tmp_path: Path, **overrides: object) -> Path:
    data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8"))
    data.update(overrides)
    path = tmp_path / "payroll.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_bundled_configuration_loads() -> None:
    config = load_payroll_configuration()

    assert config.pension.employee_rate == 0.07
    assert config.allowances.exemption_per_allowance == 600
    assert config.solver.max_iterations == 20
    assert config.overtime.hours_per_month == 240
    assert config.currency.code == "ETB"
    assert dict(config.deductibles) == {
        2000: 0,
        4000: 300,
        7000: 500,
        10000: 850,
        14000: 1350,
        None: 2050,
    }


def test_configuration_is_immutable() -> None:
    config = load_payroll_configuration()

    with pytest.raises(Exception):
        config.pension.employee_rate = 0.1  # type: ignore[misc]


def test_env_override_is_used(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, isolated_loader
) -> None:
    path = _write_variant(tmp_path, pension={"employee_rate": 0.11})
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

    assert resolve_config_path() == path
    assert isolated_loader().pension.employee_rate == 0.11


def test_missing_override_is_ignored_with_warning(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "nowhere.yaml"))
    caplog.set_level(logging.WARNING)

    assert resolve_config_path() == CONFIG_FILE
    assert any(CONFIG_ENV_VAR in record.getMessage() for record in caplog.records)


def test_invalid_override_raises_configuration_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, isolated_loader
) -> None:
    path = _write_variant(tmp_path, overtime={
        "days_per_month": 30,
        "hours_per_day": 8,
        "default_multiplier": "night",
        "multipliers": {"standard": 1.5},
    })
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

    with pytest.raises(ConfigurationError, match="validation failed"):
        isolated_loader()


def test_schedule_must_end_open_ended() -> None:
    data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8"))
    data["tax_brackets"] = data["tax_brackets"][:-1]

    with pytest.raises(ValueError, match="open-ended"):
        PayrollConfiguration.model_validate(data)


def test_bracket_rates_above_statutory_maximum_are_rejected() -> None:
    with pytest.raises(ValueError, match="between 0 and 0.35"):
        TaxBracket(min=0, max=2000, rate=0.5, label="too high")
