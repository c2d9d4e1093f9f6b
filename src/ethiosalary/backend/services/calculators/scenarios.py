"""Helpers layered on the salary engine: overtime, what-if runs, percentages, FX."""

from __future__ import annotations

from ethiosalary.backend.app.models import SalaryCalculation, SalaryInputs, WhatIfComparison
from ethiosalary.backend.config.payroll_config import load_payroll_configuration

from .salary import calculate_salary


def hourly_rate(base_salary: float) -> float:
    """Return the hourly equivalent of a monthly basic salary."""

    overtime = load_payroll_configuration().overtime
    return base_salary / overtime.hours_per_month


def resolve_overtime_multiplier(rate: str | float | None = None) -> float:
    """Map a named premium (``standard``, ``holiday_night``...) or number to a multiplier."""

    overtime = load_payroll_configuration().overtime
    if rate is None:
        return overtime.multipliers[overtime.default_multiplier]
    if isinstance(rate, str):
        try:
            return overtime.multipliers[rate]
        except KeyError:
            known = ", ".join(sorted(overtime.multipliers))
            raise ValueError(
                f"Unknown overtime rate '{rate}' (expected one of: {known})"
            ) from None
    return float(rate)


def calculate_overtime_pay(
    base_salary: float, hours: float, multiplier: float | None = None
) -> float:
    """Return overtime pay for ``hours`` at ``multiplier`` times the hourly rate."""

    if multiplier is None:
        multiplier = resolve_overtime_multiplier()
    return hours * hourly_rate(base_salary) * multiplier


def allowance_from_percentage(base_salary: float, percentage: float) -> float:
    """Return the allowance amount equal to ``percentage`` of the basic salary."""

    return (base_salary * percentage) / 100


def percentage_of_base(base_salary: float, amount: float) -> float:
    """Return ``amount`` as a percentage of the basic salary (0 without a salary)."""

    if base_salary > 0:
        return (amount / base_salary) * 100
    return 0.0


def _percent_change(difference: float, reference: float) -> float:
    if reference > 0:
        return (difference / reference) * 100
    return 0.0


def calculate_what_if(
    base_inputs: SalaryInputs,
    *,
    salary_percent: float = 100.0,
    allowance_percent: float = 100.0,
    overtime_hours: float = 0.0,
    baseline: SalaryCalculation | None = None,
) -> WhatIfComparison:
    """Compare ``base_inputs`` with a scaled scenario.

    Basic salary and the three named allowances are scaled by the given
    percentages. Overtime pay in the scenario is always derived from
    ``overtime_hours`` at the default premium and the unscaled basic salary;
    any overtime pay on the baseline is not carried over.
    """

    if baseline is None:
        baseline = calculate_salary(base_inputs)

    overtime = load_payroll_configuration().overtime
    premium = overtime.multipliers[overtime.default_multiplier]

    scenario_inputs = base_inputs.model_copy(
        update={
            "gross_salary": (base_inputs.gross_salary * salary_percent) / 100,
            "transport_allowance": (base_inputs.transport_allowance * allowance_percent) / 100,
            "housing_allowance": (base_inputs.housing_allowance * allowance_percent) / 100,
            "medical_allowance": (base_inputs.medical_allowance * allowance_percent) / 100,
            "overtime_pay": (base_inputs.gross_salary / overtime.hours_per_month)
            * overtime_hours
            * premium,
        }
    )
    scenario = calculate_salary(scenario_inputs)

    net_difference = scenario.net_salary - baseline.net_salary
    tax_difference = scenario.income_tax - baseline.income_tax

    return WhatIfComparison(
        baseline=baseline,
        scenario=scenario,
        scenario_inputs=scenario_inputs,
        net_salary_difference=net_difference,
        net_salary_percent_change=_percent_change(net_difference, baseline.net_salary),
        tax_difference=tax_difference,
        tax_percent_change=_percent_change(tax_difference, baseline.income_tax),
        annual_net_impact=net_difference * 12,
    )


def supported_currencies() -> tuple[str, ...]:
    """Return the foreign currency codes with a configured indicative rate."""

    return tuple(load_payroll_configuration().currency.exchange_rates)


def convert_currency(amount: float, currency: str) -> float:
    """Convert a birr ``amount`` into ``currency`` using the indicative rate."""

    rates = load_payroll_configuration().currency.exchange_rates
    code = currency.strip().upper()
    if code not in rates:
        known = ", ".join(sorted(rates))
        raise ValueError(f"Unsupported currency '{currency}' (expected one of: {known})")
    return amount * rates[code]


__all__ = [
    "allowance_from_percentage",
    "calculate_overtime_pay",
    "calculate_what_if",
    "convert_currency",
    "hourly_rate",
    "percentage_of_base",
    "resolve_overtime_multiplier",
    "supported_currencies",
]
