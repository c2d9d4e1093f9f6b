"""REST endpoints for salary and tax calculations."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from ethiosalary.backend.services import (
    build_calculation_response,
    calculate_net_to_gross,
    calculate_payroll,
    calculate_tax_only,
    calculate_what_if_scenario,
    parse_calculation_payload,
)

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1/calculations")


@blueprint.post("")
def create_calculation() -> tuple[Any, int]:
    """Return the gross-to-net breakdown for the submitted salary profile."""

    payload = parse_calculation_payload(request)
    return build_calculation_response(calculate_payroll(payload))


@blueprint.post("/required-gross")
def solve_required_gross() -> tuple[Any, int]:
    """Return the basic salary needed to reach ``desired_net_salary``."""

    payload = parse_calculation_payload(request)
    return build_calculation_response(calculate_net_to_gross(payload))


@blueprint.post("/what-if")
def compare_scenario() -> tuple[Any, int]:
    payload = parse_calculation_payload(request)
    return build_calculation_response(calculate_what_if_scenario(payload))


@blueprint.post("/income-tax")
def calculate_income_tax() -> tuple[Any, int]:
    """Return PAYE for a bare taxable income."""

    payload = parse_calculation_payload(request)
    return build_calculation_response(calculate_tax_only(payload))
