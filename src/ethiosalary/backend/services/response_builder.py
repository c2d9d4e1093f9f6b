"""Utilities for serialising calculation results into response payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Tuple

from flask import jsonify

from ethiosalary.backend.app.localization import Translator
from ethiosalary.backend.app.models import (
    BracketDetail,
    CalculationResponse,
    SalaryCalculation,
    SalaryInputs,
)
from ethiosalary.backend.config.payroll_config import TaxBracket

from .calculators import TAX_BRACKETS, PENSION_RATE, round_currency, round_rate

ResponseTuple = Tuple[Any, int]

_SUMMARY_FIELDS = (
    "basic_salary",
    "gross_salary",
    "total_allowances",
    "taxable_allowances",
    "non_taxable_allowances",
    "taxable_income",
    "income_tax",
    "pension_contribution",
    "other_deductions",
    "total_deductions",
    "overtime_pay",
    "net_salary",
    "annual_net_salary",
    "effective_tax_rate",
    "marginal_tax_rate",
)

_RATE_FIELDS = {"effective_tax_rate", "marginal_tax_rate"}


def bracket_label(bracket: TaxBracket, translator: Translator) -> str:
    """Return the localised label for ``bracket`` (configured label as fallback)."""

    try:
        index = TAX_BRACKETS.index(bracket)
    except ValueError:
        return bracket.label
    return translator.get(f"brackets.{index}", bracket.label)


def other_deductions_total(inputs: SalaryInputs) -> float:
    """Return union dues plus every loan and other deduction."""

    return (
        inputs.union_dues
        + sum(loan.amount for loan in inputs.loan_deductions)
        + sum(deduction.amount for deduction in inputs.other_deductions)
    )


def earnings_rows(inputs: SalaryInputs, translator: Translator) -> list[dict[str, Any]]:
    """Return payslip earnings rows: basic salary, non-zero allowances, overtime."""

    rows: list[dict[str, Any]] = [
        {
            "type": "basic_salary",
            "label": translator("earnings.basic_salary"),
            "amount": inputs.gross_salary,
        }
    ]

    for key, amount in (
        ("housing", inputs.housing_allowance),
        ("transport", inputs.transport_allowance),
        ("medical", inputs.medical_allowance),
    ):
        if amount > 0:
            rows.append(
                {"type": key, "label": translator(f"earnings.{key}"), "amount": amount}
            )

    for allowance in inputs.other_allowances:
        if allowance.amount > 0:
            rows.append(
                {
                    "type": "other_allowance",
                    "label": allowance.name or translator("earnings.other"),
                    "amount": allowance.amount,
                }
            )

    if inputs.overtime_pay > 0:
        rows.append(
            {
                "type": "overtime",
                "label": translator("earnings.overtime"),
                "amount": inputs.overtime_pay,
            }
        )

    return rows


def deduction_rows(
    inputs: SalaryInputs, calculation: SalaryCalculation, translator: Translator
) -> list[dict[str, Any]]:
    """Return payslip deduction rows; loans and other deductions are totalled."""

    rows: list[dict[str, Any]] = [
        {
            "type": "pension",
            "label": translator("deductions.pension"),
            "amount": calculation.pension_contribution,
        }
    ]

    if inputs.union_dues > 0:
        rows.append(
            {
                "type": "union_dues",
                "label": translator("deductions.union_dues"),
                "amount": inputs.union_dues,
            }
        )

    loans_total = sum(loan.amount for loan in inputs.loan_deductions)
    if loans_total > 0:
        rows.append(
            {"type": "loans", "label": translator("deductions.loans"), "amount": loans_total}
        )

    other_total = sum(deduction.amount for deduction in inputs.other_deductions)
    if other_total > 0:
        rows.append(
            {"type": "other", "label": translator("deductions.other"), "amount": other_total}
        )

    rows.append(
        {
            "type": "income_tax",
            "label": translator("deductions.income_tax"),
            "amount": calculation.income_tax,
        }
    )
    return rows


def serialise_bracket_details(
    details: tuple[BracketDetail, ...], translator: Translator
) -> list[dict[str, Any]]:
    return [
        {
            "label": bracket_label(detail.bracket, translator),
            "min": detail.bracket.lower_bound,
            "max": detail.bracket.upper_bound,
            "rate": detail.bracket.rate,
            "taxable_amount": round_currency(detail.taxable_amount),
            "tax_amount": round_currency(detail.tax_amount),
        }
        for detail in details
    ]


def serialise_calculation(
    inputs: SalaryInputs,
    calculation: SalaryCalculation,
    translator: Translator,
    *,
    currency: str = "ETB",
) -> dict[str, Any]:
    """Return the JSON-ready payload for a completed salary calculation."""

    figures: dict[str, float] = {
        "basic_salary": inputs.gross_salary,
        "gross_salary": calculation.gross_salary,
        "total_allowances": calculation.total_allowances,
        "taxable_allowances": calculation.taxable_allowances,
        "non_taxable_allowances": calculation.non_taxable_allowances,
        "taxable_income": calculation.taxable_income,
        "income_tax": calculation.income_tax,
        "pension_contribution": calculation.pension_contribution,
        "other_deductions": other_deductions_total(inputs),
        "total_deductions": calculation.total_deductions,
        "overtime_pay": inputs.overtime_pay,
        "net_salary": calculation.net_salary,
        "annual_net_salary": calculation.net_salary * 12,
        "effective_tax_rate": calculation.effective_tax_rate,
        "marginal_tax_rate": calculation.marginal_tax_rate,
    }

    summary: dict[str, Any] = {
        name: round_rate(value) if name in _RATE_FIELDS else round_currency(value)
        for name, value in figures.items()
    }
    summary["labels"] = {name: translator(f"summary.{name}") for name in _SUMMARY_FIELDS}

    def _rounded(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [{**row, "amount": round_currency(row["amount"])} for row in rows]

    response_model = CalculationResponse.model_validate(
        {
            "summary": summary,
            "tax_brackets": serialise_bracket_details(
                calculation.tax_bracket_details, translator
            ),
            "earnings": _rounded(earnings_rows(inputs, translator)),
            "deductions": _rounded(deduction_rows(inputs, calculation, translator)),
            "meta": {
                "locale": translator.locale,
                "currency": currency,
                "pension_rate": PENSION_RATE,
            },
        }
    )

    return response_model.model_dump(mode="json")


def build_calculation_response(
    payload: Mapping[str, Any], *, status: int = 200
) -> ResponseTuple:
    """Return a Flask JSON response for the calculation ``payload``."""

    return jsonify(payload), status


__all__ = [
    "ResponseTuple",
    "bracket_label",
    "build_calculation_response",
    "deduction_rows",
    "earnings_rows",
    "other_deductions_total",
    "serialise_bracket_details",
    "serialise_calculation",
]
