"""Typed engine inputs and derived results shared across the calculation services.

Requests arriving over HTTP are validated by the Pydantic models in
:mod:`.api`; the calculation service then normalises them into a frozen
:class:`SalaryInputs` value that the engine consumes. The engine itself performs
no validation, so these models carry no range constraints: negative or
non-finite amounts flow through arithmetically and surface in the results.
Derived results are lightweight frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

from ethiosalary.backend.config.schema import TaxBracket

from .api import (
    AllowanceInput,
    CalculationResponse,
    ConversionRequest,
    DeductionInput,
    EmailRequest,
    IncomeTaxRequest,
    OtherAllowanceInput,
    OvertimeInput,
    RequiredGrossRequest,
    SalaryRequest,
    Summary,
    SummaryLabels,
    WhatIfRequest,
    format_validation_error,
)

__all__ = [
    "AllowanceInput",
    "BracketDetail",
    "CalculationResponse",
    "ConversionRequest",
    "DeductionInput",
    "EmailRequest",
    "IncomeTaxRequest",
    "IncomeTaxResult",
    "NamedDeduction",
    "OtherAllowance",
    "OtherAllowanceInput",
    "OvertimeInput",
    "RequiredGrossRequest",
    "SalaryCalculation",
    "SalaryInputs",
    "SalaryRequest",
    "Summary",
    "SummaryLabels",
    "WhatIfComparison",
    "WhatIfRequest",
    "format_validation_error",
]


class OtherAllowance(BaseModel):
    """Free-form allowance entered alongside the three named allowances."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = ""
    amount: float = 0.0
    taxable: bool = False
    percentage: float | None = None


class NamedDeduction(BaseModel):
    """Loan repayment or other deduction taken from net pay."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = ""
    amount: float = 0.0


class SalaryInputs(BaseModel):
    """Monthly salary profile consumed by :func:`calculate_salary`.

    ``gross_salary`` is the basic salary before allowances. The ``*_percentage``
    fields mirror each named allowance as a share of the basic salary for
    display purposes only; the engine always reads the amounts.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    gross_salary: float = 0.0
    transport_allowance: float = 0.0
    transport_taxable: bool = False
    transport_percentage: float = 0.0
    housing_allowance: float = 0.0
    housing_taxable: bool = False
    housing_percentage: float = 0.0
    medical_allowance: float = 0.0
    medical_taxable: bool = False
    medical_percentage: float = 0.0
    other_allowances: tuple[OtherAllowance, ...] = ()
    overtime_pay: float = 0.0
    union_dues: float = 0.0
    loan_deductions: tuple[NamedDeduction, ...] = ()
    other_deductions: tuple[NamedDeduction, ...] = ()


@dataclass(frozen=True)
class BracketDetail:
    """Taxable amount and tax attributed to a single bracket."""

    bracket: TaxBracket
    taxable_amount: float
    tax_amount: float


@dataclass(frozen=True)
class IncomeTaxResult:
    """Outcome of applying the PAYE schedule to a taxable income."""

    total_tax: float
    bracket_details: tuple[BracketDetail, ...]
    effective_tax_rate: float
    marginal_tax_rate: float


@dataclass(frozen=True)
class SalaryCalculation:
    """Complete gross-to-net breakdown for one :class:`SalaryInputs` value."""

    gross_salary: float
    total_allowances: float
    taxable_allowances: float
    non_taxable_allowances: float
    taxable_income: float
    income_tax: float
    pension_contribution: float
    total_deductions: float
    net_salary: float
    tax_bracket_details: tuple[BracketDetail, ...]
    effective_tax_rate: float
    marginal_tax_rate: float


@dataclass(frozen=True)
class WhatIfComparison:
    """Baseline and adjusted calculations with their differences."""

    baseline: SalaryCalculation
    scenario: SalaryCalculation
    scenario_inputs: SalaryInputs
    net_salary_difference: float
    net_salary_percent_change: float
    tax_difference: float
    tax_percent_change: float
    annual_net_impact: float
