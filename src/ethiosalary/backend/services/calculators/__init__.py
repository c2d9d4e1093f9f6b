"""Domain-specific calculation helpers."""

from .income_tax import TAX_BRACKETS, TAX_DEDUCTIBLES, calculate_income_tax, select_bracket
from .salary import ALLOWANCE_EXEMPTION, PENSION_RATE, calculate_salary
from .scenarios import (
    allowance_from_percentage,
    calculate_overtime_pay,
    calculate_what_if,
    convert_currency,
    hourly_rate,
    percentage_of_base,
    resolve_overtime_multiplier,
    supported_currencies,
)
from .solver import calculate_required_gross_salary
from .utils import (
    format_currency,
    format_foreign_currency,
    format_number,
    format_percentage,
    round_currency,
    round_rate,
)

__all__ = [
    "ALLOWANCE_EXEMPTION",
    "PENSION_RATE",
    "TAX_BRACKETS",
    "TAX_DEDUCTIBLES",
    "allowance_from_percentage",
    "calculate_income_tax",
    "calculate_overtime_pay",
    "calculate_required_gross_salary",
    "calculate_salary",
    "calculate_what_if",
    "convert_currency",
    "format_currency",
    "format_foreign_currency",
    "format_number",
    "format_percentage",
    "hourly_rate",
    "percentage_of_base",
    "resolve_overtime_multiplier",
    "round_currency",
    "round_rate",
    "select_bracket",
    "supported_currencies",
]
