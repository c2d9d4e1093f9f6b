"""Service-layer helpers for the salary calculator backend."""

from .calculation_service import (
    SalaryComputation,
    build_salary_inputs,
    calculate_net_to_gross,
    calculate_payroll,
    calculate_tax_only,
    calculate_what_if_scenario,
    compute_salary,
    convert_amount,
)
from .request_parser import parse_calculation_payload, resolve_request_locale
from .response_builder import build_calculation_response

__all__ = [
    "SalaryComputation",
    "build_calculation_response",
    "build_salary_inputs",
    "calculate_net_to_gross",
    "calculate_payroll",
    "calculate_tax_only",
    "calculate_what_if_scenario",
    "compute_salary",
    "convert_amount",
    "parse_calculation_payload",
    "resolve_request_locale",
]
