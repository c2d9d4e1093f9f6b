"""Unit tests for the gross-to-net salary aggregation."""

from __future__ import annotations

import math

import pytest

from ethiosalary.backend.app.models import NamedDeduction, OtherAllowance, SalaryInputs
from ethiosalary.backend.services.calculators import (
    ALLOWANCE_EXEMPTION,
    PENSION_RATE,
    calculate_salary,
)


def test_constants_match_statutory_values() -> None:
    assert PENSION_RATE == 0.07
    assert ALLOWANCE_EXEMPTION == 600


def test_basic_salary_only() -> None:
    result = calculate_salary(SalaryInputs(gross_salary=5000))

    assert result.gross_salary == 5000
    assert result.total_allowances == 0
    assert result.taxable_income == 5000
    assert result.income_tax == pytest.approx(500)
    assert result.pension_contribution == pytest.approx(350)
    assert result.total_deductions == pytest.approx(850)
    assert result.net_salary == pytest.approx(4150)
    assert result.marginal_tax_rate == 0.20
    assert result.effective_tax_rate == pytest.approx(0.1)


def test_taxable_allowance_above_exemption() -> None:
    result = calculate_salary(
        SalaryInputs(gross_salary=5000, housing_allowance=1000, housing_taxable=True)
    )

    assert result.gross_salary == 6000
    assert result.taxable_allowances == 1000
    assert result.non_taxable_allowances == 0
    assert result.taxable_income == pytest.approx(5400)
    assert result.income_tax == pytest.approx(580)
    assert result.net_salary == pytest.approx(5070)


def test_non_taxable_allowance_is_ignored_for_tax() -> None:
    result = calculate_salary(SalaryInputs(gross_salary=5000, housing_allowance=1000))

    assert result.taxable_income == 5000
    assert result.non_taxable_allowances == 1000
    assert result.net_salary == pytest.approx(5150)


def test_exemption_applies_per_allowance() -> None:
    result = calculate_salary(
        SalaryInputs(
            gross_salary=5000,
            transport_allowance=400,
            transport_taxable=True,
            medical_allowance=900,
            medical_taxable=True,
        )
    )

    # 400 is fully exempt; only 300 of the medical allowance is taxed.
    assert result.taxable_allowances == 1300
    assert result.taxable_income == pytest.approx(5300)


def test_other_allowances_follow_their_taxable_flag() -> None:
    result = calculate_salary(
        SalaryInputs(
            gross_salary=5000,
            other_allowances=(
                OtherAllowance(name="Hardship", amount=1000, taxable=True),
                OtherAllowance(name="Meal", amount=700, taxable=False),
            ),
        )
    )

    assert result.total_allowances == 1700
    assert result.taxable_allowances == 1000
    assert result.non_taxable_allowances == 700
    assert result.taxable_income == pytest.approx(5400)


def test_pension_uses_basic_salary_only() -> None:
    result = calculate_salary(
        SalaryInputs(gross_salary=10000, transport_allowance=2000, transport_taxable=True)
    )

    assert result.pension_contribution == pytest.approx(700)


def test_overtime_counts_towards_net_but_not_reported_gross() -> None:
    result = calculate_salary(SalaryInputs(gross_salary=5000, overtime_pay=300))

    assert result.gross_salary == 5000
    assert result.taxable_income == 5000
    assert result.net_salary == pytest.approx(4450)


def test_other_deductions_reduce_net_salary() -> None:
    result = calculate_salary(
        SalaryInputs(
            gross_salary=5000,
            union_dues=50,
            loan_deductions=(
                NamedDeduction(name="Car", amount=100),
                NamedDeduction(name="House", amount=200),
            ),
            other_deductions=(NamedDeduction(name="Cooperative", amount=25),),
        )
    )

    assert result.total_deductions == pytest.approx(500 + 350 + 375)
    assert result.net_salary == pytest.approx(3775)


def test_zero_profile_returns_zeroes() -> None:
    result = calculate_salary(SalaryInputs())

    assert result.net_salary == 0
    assert result.income_tax == 0
    assert result.effective_tax_rate == 0


def test_negative_values_propagate_without_raising() -> None:
    result = calculate_salary(SalaryInputs(gross_salary=5000, transport_allowance=-1000))

    assert result.total_allowances == -1000
    assert result.gross_salary == 4000


def test_nan_salary_poisons_results() -> None:
    result = calculate_salary(SalaryInputs(gross_salary=float("nan")))

    assert math.isnan(result.net_salary)
    assert math.isnan(result.pension_contribution)
