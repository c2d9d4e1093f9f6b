"""Gross-to-net salary aggregation."""

from __future__ import annotations

from ethiosalary.backend.app.models import SalaryCalculation, SalaryInputs
from ethiosalary.backend.config.payroll_config import load_payroll_configuration

from .income_tax import calculate_income_tax
from .utils import clamp_non_negative

_CONFIG = load_payroll_configuration()

PENSION_RATE: float = _CONFIG.pension.employee_rate
ALLOWANCE_EXEMPTION: float = _CONFIG.allowances.exemption_per_allowance


def _taxable_portion(amount: float, taxable: bool) -> float:
    # The exemption applies to each taxable allowance on its own.
    if not taxable:
        return 0.0
    return clamp_non_negative(amount - ALLOWANCE_EXEMPTION)


def calculate_salary(inputs: SalaryInputs) -> SalaryCalculation:
    """Compute the full monthly breakdown for ``inputs``.

    The reported ``gross_salary`` is basic salary plus allowances. Net salary
    is derived from that figure plus overtime pay, so the two gross
    quantities differ whenever overtime is present.
    """

    other_allowances = inputs.other_allowances

    total_allowances = (
        inputs.transport_allowance
        + inputs.housing_allowance
        + inputs.medical_allowance
        + sum(allowance.amount for allowance in other_allowances)
    )

    gross_salary = inputs.gross_salary + total_allowances

    taxable_allowances = (
        (inputs.transport_allowance if inputs.transport_taxable else 0.0)
        + (inputs.housing_allowance if inputs.housing_taxable else 0.0)
        + (inputs.medical_allowance if inputs.medical_taxable else 0.0)
        + sum(allowance.amount for allowance in other_allowances if allowance.taxable)
    )
    non_taxable_allowances = total_allowances - taxable_allowances

    taxable_income = (
        inputs.gross_salary
        + _taxable_portion(inputs.housing_allowance, inputs.housing_taxable)
        + _taxable_portion(inputs.medical_allowance, inputs.medical_taxable)
        + _taxable_portion(inputs.transport_allowance, inputs.transport_taxable)
        + sum(
            _taxable_portion(allowance.amount, allowance.taxable)
            for allowance in other_allowances
        )
    )

    tax = calculate_income_tax(taxable_income)

    pension_contribution = inputs.gross_salary * PENSION_RATE

    total_other_deductions = (
        inputs.union_dues
        + sum(loan.amount for loan in inputs.loan_deductions)
        + sum(deduction.amount for deduction in inputs.other_deductions)
    )

    total_deductions = tax.total_tax + pension_contribution + total_other_deductions

    gross_income = inputs.gross_salary + total_allowances + inputs.overtime_pay
    net_salary = gross_income - total_deductions

    return SalaryCalculation(
        gross_salary=gross_salary,
        total_allowances=total_allowances,
        taxable_allowances=taxable_allowances,
        non_taxable_allowances=non_taxable_allowances,
        taxable_income=taxable_income,
        income_tax=tax.total_tax,
        pension_contribution=pension_contribution,
        total_deductions=total_deductions,
        net_salary=net_salary,
        tax_bracket_details=tax.bracket_details,
        effective_tax_rate=tax.effective_tax_rate,
        marginal_tax_rate=tax.marginal_tax_rate,
    )


__all__ = ["ALLOWANCE_EXEMPTION", "PENSION_RATE", "calculate_salary"]
