"""Expose payroll configuration consumed by front-end forms and charts.

These endpoints surface the YAML-backed schedule so clients can render bracket
tables, overtime rate pickers and currency selectors without duplicating the
numbers baked into the calculators.
"""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request

from ethiosalary.backend.app.localization import get_translator
from ethiosalary.backend.config.payroll_config import (
    PayrollConfiguration,
    load_payroll_configuration,
)
from ethiosalary.backend.services import resolve_request_locale
from ethiosalary.backend.services.response_builder import bracket_label
from ethiosalary.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the payroll configuration."""

    config = load_payroll_configuration()
    return {
        "version": get_project_version(),
        "jurisdiction": config.meta.get("jurisdiction"),
        "currency": config.currency.code,
        "bracket_count": len(config.brackets),
    }


def _serialise_brackets(config: PayrollConfiguration, locale: str) -> list[dict[str, Any]]:
    translator = get_translator(locale)
    return [
        {
            "index": index,
            "label": bracket_label(entry.to_bracket(), translator),
            "min": entry.lower_bound,
            "max": entry.upper_bound,
            "rate": entry.rate,
            "deductible": entry.deductible,
        }
        for index, entry in enumerate(config.tax_brackets)
    ]


@blueprint.get("/brackets")
def list_brackets():
    """Return the PAYE schedule with localised labels and deductibles."""

    config = load_payroll_configuration()
    locale = resolve_request_locale(request)
    return (
        jsonify(
            {
                "locale": locale,
                "currency": config.currency.code,
                "brackets": _serialise_brackets(config, locale),
            }
        ),
        200,
    )


@blueprint.get("/payroll")
def get_payroll_parameters():
    """Return pension, exemption, solver and overtime parameters."""

    config = load_payroll_configuration()
    overtime = config.overtime
    return (
        jsonify(
            {
                "pension_rate": config.pension.employee_rate,
                "allowance_exemption": config.allowances.exemption_per_allowance,
                "solver": config.solver.model_dump(mode="json"),
                "overtime": {
                    "days_per_month": overtime.days_per_month,
                    "hours_per_day": overtime.hours_per_day,
                    "hours_per_month": overtime.hours_per_month,
                    "default_multiplier": overtime.default_multiplier,
                    "multipliers": dict(overtime.multipliers),
                },
            }
        ),
        200,
    )


@blueprint.get("/exchange-rates")
def get_exchange_rates():
    """Return the indicative ETB exchange rates used by the converter."""

    currency = load_payroll_configuration().currency
    return (
        jsonify(
            {
                "base": currency.code,
                "rates": dict(currency.exchange_rates),
                "indicative": True,
            }
        ),
        200,
    )
