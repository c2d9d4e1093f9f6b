"""Configuration loader wrapping the shared schema models."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .schema import (
    AllowanceConfig,
    ConfigurationError,
    CurrencyConfig,
    OvertimeConfig,
    PayrollConfiguration,
    PensionConfig,
    SolverConfig,
    TaxBracket,
    TaxScheduleEntry,
)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
CONFIG_FILE = CONFIG_DIRECTORY / "payroll.yaml"
CONFIG_ENV_VAR = "ETHIOSALARY_PAYROLL_CONFIG"

_LOGGER = logging.getLogger(__name__)


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


def resolve_config_path() -> Path:
    """Return the YAML file to load, honouring ``ETHIOSALARY_PAYROLL_CONFIG``."""

    override = os.getenv(CONFIG_ENV_VAR, "").strip()
    if not override:
        return CONFIG_FILE

    candidate = Path(override).expanduser()
    if not candidate.is_file():
        _LOGGER.warning(
            "Ignoring %s=%s: file not found, using bundled configuration",
            CONFIG_ENV_VAR,
            override,
        )
        return CONFIG_FILE
    return candidate


@lru_cache(maxsize=1)
def load_payroll_configuration() -> PayrollConfiguration:
    """Load, validate and cache the payroll configuration from disk.

    The result is cached for the lifetime of the process; call
    ``load_payroll_configuration.cache_clear()`` after changing the override.
    Calculator modules bind their constants at import time and keep using the
    configuration that was active then.
    """

    path = resolve_config_path()
    if not path.exists():
        raise FileNotFoundError(f"Payroll configuration missing: {path.name}")

    raw_config = _load_yaml(path)

    try:
        return PayrollConfiguration.model_validate(raw_config)
    except ValidationError as error:
        raise ConfigurationError(f"Payroll configuration validation failed: {error}") from error


__all__ = [
    "AllowanceConfig",
    "CONFIG_DIRECTORY",
    "CONFIG_ENV_VAR",
    "CONFIG_FILE",
    "ConfigurationError",
    "CurrencyConfig",
    "OvertimeConfig",
    "PayrollConfiguration",
    "PensionConfig",
    "SolverConfig",
    "TaxBracket",
    "TaxScheduleEntry",
    "load_payroll_configuration",
    "resolve_config_path",
]
