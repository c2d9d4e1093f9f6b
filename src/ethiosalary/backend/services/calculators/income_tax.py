"""PAYE income tax on monthly employment income.

The schedule is applied with the single-bracket shortcut found in published
PAYE tables: the whole taxable income is
multiplied by the applicable bracket's rate and a fixed deductible is
subtracted. The deductibles are chosen so the result equals a cumulative
bracket-by-bracket computation. The bracket breakdown returned to callers
attributes the full income and tax to that one bracket; visualisations rely on
this shape.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from ethiosalary.backend.app.models import BracketDetail, IncomeTaxResult
from ethiosalary.backend.config.payroll_config import (
    TaxBracket,
    load_payroll_configuration,
)

from .utils import clamp_non_negative

_CONFIG = load_payroll_configuration()

TAX_BRACKETS: tuple[TaxBracket, ...] = _CONFIG.brackets
"""Ordered, read-only PAYE schedule."""

TAX_DEDUCTIBLES: Mapping[float | None, float] = _CONFIG.deductibles
"""Deductible offsets keyed by each bracket's upper threshold (``None`` when open)."""


def select_bracket(
    taxable_income: float, brackets: Sequence[TaxBracket] = TAX_BRACKETS
) -> TaxBracket:
    """Return the first bracket whose ceiling covers ``taxable_income``."""

    for bracket in brackets:
        if bracket.contains(taxable_income):
            return bracket
    return brackets[-1]


def calculate_income_tax(taxable_income: float) -> IncomeTaxResult:
    """Compute PAYE owed on ``taxable_income``.

    Negative income falls into the exempt bracket and yields zero tax. NaN is
    not clamped and propagates into the tax; the effective rate stays 0.0
    because ``NaN > 0`` is false.
    """

    bracket = select_bracket(taxable_income)
    deductible = TAX_DEDUCTIBLES[bracket.upper_bound]

    tax = taxable_income * bracket.rate - deductible
    detail = BracketDetail(
        bracket=bracket,
        taxable_amount=taxable_income,
        tax_amount=tax,
    )

    total_tax = clamp_non_negative(tax)
    effective_tax_rate = total_tax / taxable_income if taxable_income > 0 else 0.0

    return IncomeTaxResult(
        total_tax=total_tax,
        bracket_details=(detail,),
        effective_tax_rate=effective_tax_rate,
        marginal_tax_rate=bracket.rate,
    )


__all__ = ["TAX_BRACKETS", "TAX_DEDUCTIBLES", "calculate_income_tax", "select_bracket"]
