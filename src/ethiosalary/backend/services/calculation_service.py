"""Orchestrate request validation, normalisation, and salary calculations.

The calculation service turns validated API payloads into the frozen
:class:`~ethiosalary.backend.app.models.SalaryInputs` value the engine consumes,
runs the relevant engine function, and hands the results to the response
builder. Allowance percentages and overtime hours are resolved here so the
engine only ever sees monetary amounts. Profiling hooks live here as well,
controlled by ``ETHIOSALARY_PROFILE_CALCULATIONS``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from time import perf_counter
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ethiosalary.backend.app.localization import Translator, get_translator
from ethiosalary.backend.app.models import (
    AllowanceInput,
    ConversionRequest,
    IncomeTaxRequest,
    NamedDeduction,
    OtherAllowance,
    RequiredGrossRequest,
    SalaryCalculation,
    SalaryInputs,
    SalaryRequest,
    WhatIfRequest,
    format_validation_error,
)
from ethiosalary.backend.config.payroll_config import load_payroll_configuration

from .calculators import (
    allowance_from_percentage,
    calculate_income_tax,
    calculate_overtime_pay,
    calculate_required_gross_salary,
    calculate_salary,
    calculate_what_if,
    convert_currency,
    format_foreign_currency,
    hourly_rate,
    percentage_of_base,
    resolve_overtime_multiplier,
    round_currency,
    round_rate,
)
from .response_builder import bracket_label, serialise_calculation

_LOGGER = logging.getLogger(__name__)

_RequestModel = TypeVar("_RequestModel", bound=BaseModel)


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("ETHIOSALARY_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _log_timings(operation: str, timings: dict[str, float] | None, start: float | None) -> None:
    if timings is None or start is None:
        return
    timings["total"] = perf_counter() - start
    _LOGGER.debug(
        "%s timings (ms): %s",
        operation,
        {name: round(duration * 1000, 3) for name, duration in timings.items()},
    )


def _validate(model: type[_RequestModel], payload: Mapping[str, Any]) -> _RequestModel:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc)) from exc


@dataclass(frozen=True)
class SalaryComputation:
    """Normalised engine inputs together with their calculation and translator."""

    inputs: SalaryInputs
    calculation: SalaryCalculation
    translator: Translator


def _resolve_allowance(base_salary: float, allowance: AllowanceInput) -> tuple[float, float]:
    """Return ``(amount, percentage)`` for an allowance given either figure."""

    if allowance.amount is not None:
        amount = allowance.amount
        return amount, percentage_of_base(base_salary, amount)
    if allowance.percentage is not None:
        return allowance_from_percentage(base_salary, allowance.percentage), allowance.percentage
    return 0.0, 0.0


def _resolve_overtime_pay(request: SalaryRequest) -> float:
    overtime = request.overtime
    if overtime is None or overtime.hours <= 0:
        return request.overtime_pay

    multiplier = resolve_overtime_multiplier(overtime.rate)
    return calculate_overtime_pay(request.gross_salary, overtime.hours, multiplier)


def build_salary_inputs(request: SalaryRequest) -> SalaryInputs:
    """Normalise a validated request into the engine's :class:`SalaryInputs`."""

    base = request.gross_salary
    transport_amount, transport_pct = _resolve_allowance(base, request.transport)
    housing_amount, housing_pct = _resolve_allowance(base, request.housing)
    medical_amount, medical_pct = _resolve_allowance(base, request.medical)

    other_allowances = []
    for entry in request.other_allowances:
        amount, percentage = _resolve_allowance(base, entry)
        other_allowances.append(
            OtherAllowance(
                name=entry.name,
                amount=amount,
                taxable=entry.taxable,
                percentage=percentage if entry.percentage is not None else None,
            )
        )

    return SalaryInputs(
        gross_salary=base,
        transport_allowance=transport_amount,
        transport_taxable=request.transport.taxable,
        transport_percentage=transport_pct,
        housing_allowance=housing_amount,
        housing_taxable=request.housing.taxable,
        housing_percentage=housing_pct,
        medical_allowance=medical_amount,
        medical_taxable=request.medical.taxable,
        medical_percentage=medical_pct,
        other_allowances=tuple(other_allowances),
        overtime_pay=_resolve_overtime_pay(request),
        union_dues=request.union_dues,
        loan_deductions=tuple(
            NamedDeduction(name=entry.name, amount=entry.amount)
            for entry in request.loan_deductions
        ),
        other_deductions=tuple(
            NamedDeduction(name=entry.name, amount=entry.amount)
            for entry in request.other_deductions
        ),
    )


def compute_salary(payload: Mapping[str, Any] | SalaryRequest) -> SalaryComputation:
    """Validate ``payload`` and run the gross-to-net engine on it."""

    if isinstance(payload, SalaryRequest):
        request = payload
    else:
        request = _validate(SalaryRequest, payload)

    inputs = build_salary_inputs(request)
    calculation = calculate_salary(inputs)
    return SalaryComputation(
        inputs=inputs,
        calculation=calculation,
        translator=get_translator(request.locale),
    )


def calculate_payroll(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Validate ``payload`` and return the full localised salary breakdown."""

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    with _profile_section("validation", timings):
        request = _validate(SalaryRequest, payload)
        inputs = build_salary_inputs(request)

    with _profile_section("salary", timings):
        calculation = calculate_salary(inputs)

    translator = get_translator(request.locale)
    with _profile_section("serialise", timings):
        result = serialise_calculation(
            inputs,
            calculation,
            translator,
            currency=load_payroll_configuration().currency.code,
        )

    _log_timings("calculate_payroll", timings, overall_start)
    return result


def calculate_net_to_gross(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Solve for the basic salary that yields the requested net salary.

    The allowance and deduction profile in ``payload`` is held fixed. The
    solved basic salary is fed back through the engine so the caller can see
    how close the achieved net salary landed.
    """

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    request = _validate(RequiredGrossRequest, payload)
    profile = build_salary_inputs(request)

    with _profile_section("solver", timings):
        required_gross = calculate_required_gross_salary(
            request.desired_net_salary, profile
        )

    solved_inputs = profile.model_copy(update={"gross_salary": float(required_gross)})
    calculation = calculate_salary(solved_inputs)
    translator = get_translator(request.locale)

    _log_timings("calculate_net_to_gross", timings, overall_start)

    return {
        "desired_net_salary": round_currency(request.desired_net_salary),
        "required_gross_salary": required_gross,
        "achieved_net_salary": round_currency(calculation.net_salary),
        "difference": round_currency(calculation.net_salary - request.desired_net_salary),
        "calculation": serialise_calculation(solved_inputs, calculation, translator),
    }


def calculate_what_if_scenario(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Compare the submitted profile with a scaled scenario."""

    request = _validate(WhatIfRequest, payload)
    inputs = build_salary_inputs(request)
    translator = get_translator(request.locale)

    comparison = calculate_what_if(
        inputs,
        salary_percent=request.salary_percent,
        allowance_percent=request.allowance_percent,
        overtime_hours=request.overtime_hours,
    )

    return {
        "adjustments": {
            "salary_percent": request.salary_percent,
            "allowance_percent": request.allowance_percent,
            "overtime_hours": request.overtime_hours,
            "hourly_rate": round_currency(hourly_rate(inputs.gross_salary)),
        },
        "baseline": serialise_calculation(inputs, comparison.baseline, translator),
        "scenario": serialise_calculation(
            comparison.scenario_inputs, comparison.scenario, translator
        ),
        "impact": {
            "net_salary_difference": round_currency(comparison.net_salary_difference),
            "net_salary_percent_change": round_currency(
                comparison.net_salary_percent_change
            ),
            "tax_difference": round_currency(comparison.tax_difference),
            "tax_percent_change": round_currency(comparison.tax_percent_change),
            "annual_net_impact": round_currency(comparison.annual_net_impact),
        },
    }


def calculate_tax_only(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Return PAYE figures for a bare taxable income."""

    request = _validate(IncomeTaxRequest, payload)
    translator = get_translator(request.locale)
    result = calculate_income_tax(request.taxable_income)
    detail = result.bracket_details[0]

    return {
        "taxable_income": round_currency(request.taxable_income),
        "income_tax": round_currency(result.total_tax),
        "effective_tax_rate": round_rate(result.effective_tax_rate),
        "marginal_tax_rate": round_rate(result.marginal_tax_rate),
        "bracket": {
            "label": bracket_label(detail.bracket, translator),
            "min": detail.bracket.lower_bound,
            "max": detail.bracket.upper_bound,
            "rate": detail.bracket.rate,
        },
        "meta": {"locale": translator.locale},
    }


def convert_amount(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Convert a birr amount with the configured indicative exchange rate."""

    request = _validate(ConversionRequest, payload)
    converted = convert_currency(request.amount, request.currency)
    rates = load_payroll_configuration().currency.exchange_rates

    return {
        "amount": round_currency(request.amount),
        "currency": request.currency,
        "rate": rates[request.currency],
        "converted": round_currency(converted),
        "formatted": format_foreign_currency(converted, request.currency),
    }


__all__ = [
    "SalaryComputation",
    "build_salary_inputs",
    "calculate_net_to_gross",
    "calculate_payroll",
    "calculate_tax_only",
    "calculate_what_if_scenario",
    "compute_salary",
    "convert_amount",
]
