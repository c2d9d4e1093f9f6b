"""Pydantic models describing the public API surface."""

from __future__ import annotations

import re
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

__all__ = [
    "RequestModel",
    "AllowanceInput",
    "OtherAllowanceInput",
    "DeductionInput",
    "OvertimeInput",
    "SalaryRequest",
    "RequiredGrossRequest",
    "WhatIfRequest",
    "IncomeTaxRequest",
    "ConversionRequest",
    "EmailRequest",
    "SummaryLabels",
    "Summary",
    "BracketDetailEntry",
    "LineItem",
    "ResponseMeta",
    "CalculationResponse",
    "format_validation_error",
]

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _normalise_locale_value(value: Any) -> str:
    if value is None:
        return "en"
    text = str(value).strip()
    return text or "en"


class RequestModel(BaseModel):
    """Base for request payloads: unknown keys and non-finite numbers are rejected."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)


class AllowanceInput(RequestModel):
    """One of the three named allowances (transport, housing, medical).

    Either ``amount`` or ``percentage`` of the basic salary may be supplied;
    when both are present the amount wins and the percentage is recomputed.
    """

    amount: float | None = Field(default=None, ge=0)
    percentage: float | None = Field(default=None, ge=0)
    taxable: bool = False

    @field_validator("taxable", mode="before")
    @classmethod
    def _coerce_taxable(cls, value: Any) -> bool:
        if value is None:
            return False
        return bool(value)


class OtherAllowanceInput(AllowanceInput):
    """Named free-form allowance."""

    name: str = Field(default="", max_length=120)


class DeductionInput(RequestModel):
    """Named loan or other deduction."""

    name: str = Field(default="", max_length=120)
    amount: float = Field(default=0.0, ge=0)


class OvertimeInput(RequestModel):
    """Overtime hours worked this month and the premium applied to them."""

    hours: float = Field(default=0.0, ge=0)
    rate: str | float | None = None

    @field_validator("rate", mode="before")
    @classmethod
    def _normalise_rate(cls, value: Any) -> str | float | None:
        if isinstance(value, str):
            text = value.strip().lower()
            if not text:
                return None
            try:
                return float(text)
            except ValueError:
                return text
        return value

    @field_validator("rate", mode="after")
    @classmethod
    def _validate_numeric_rate(cls, value: str | float | None) -> str | float | None:
        if isinstance(value, float) and value < 1:
            raise ValueError("Overtime rate multiplier must be at least 1.0")
        return value


class SalaryRequest(RequestModel):
    """Complete payload accepted by the calculation endpoint."""

    locale: str = Field(default="en")
    gross_salary: float = Field(default=0.0, ge=0)
    transport: AllowanceInput = Field(default_factory=AllowanceInput)
    housing: AllowanceInput = Field(default_factory=AllowanceInput)
    medical: AllowanceInput = Field(default_factory=AllowanceInput)
    other_allowances: list[OtherAllowanceInput] = Field(default_factory=list)
    overtime_pay: float = Field(default=0.0, ge=0)
    overtime: OvertimeInput | None = None
    union_dues: float = Field(default=0.0, ge=0)
    loan_deductions: list[DeductionInput] = Field(default_factory=list)
    other_deductions: list[DeductionInput] = Field(default_factory=list)

    @field_validator("locale", mode="before")
    @classmethod
    def _normalise_locale(cls, value: Any) -> str:
        return _normalise_locale_value(value)

    @field_validator(
        "other_allowances", "loan_deductions", "other_deductions", mode="before"
    )
    @classmethod
    def _normalise_sequences(cls, value: Any) -> Any:
        if value is None:
            return []
        return value

    @model_validator(mode="after")
    def _reject_conflicting_overtime(self) -> "SalaryRequest":
        if self.overtime is not None and self.overtime.hours > 0 and self.overtime_pay > 0:
            raise ValueError("Provide either overtime_pay or overtime hours, not both")
        return self


class RequiredGrossRequest(SalaryRequest):
    """Allowance and deduction profile plus the net salary being targeted."""

    desired_net_salary: float = Field(..., ge=0)

    @model_validator(mode="after")
    def _reject_percentage_allowances(self) -> "RequiredGrossRequest":
        # The basic salary is the unknown here, so a percentage has nothing to scale.
        named = [
            (key, getattr(self, key)) for key in ("transport", "housing", "medical")
        ] + [
            (f"other_allowances.{index}", allowance)
            for index, allowance in enumerate(self.other_allowances)
        ]
        offending = [
            key
            for key, allowance in named
            if allowance.amount is None and allowance.percentage is not None
        ]
        if offending:
            raise ValueError(
                "Allowances must be given as amounts when solving for the basic salary "
                f"(percentage given for: {', '.join(offending)})"
            )
        return self


class WhatIfRequest(SalaryRequest):
    """Baseline profile plus the adjustments to explore."""

    salary_percent: float = Field(default=100.0, ge=50, le=200)
    allowance_percent: float = Field(default=100.0, ge=0, le=200)
    overtime_hours: float = Field(default=0.0, ge=0)


class IncomeTaxRequest(RequestModel):
    """Tax-only query for a single taxable income."""

    locale: str = Field(default="en")
    taxable_income: float = Field(..., ge=0)

    @field_validator("locale", mode="before")
    @classmethod
    def _normalise_locale(cls, value: Any) -> str:
        return _normalise_locale_value(value)


class ConversionRequest(RequestModel):
    """Convert a birr amount into one of the configured foreign currencies."""

    locale: str = Field(default="en")
    amount: float = Field(..., ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)

    @field_validator("currency", mode="before")
    @classmethod
    def _upper_currency(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("locale", mode="before")
    @classmethod
    def _normalise_locale(cls, value: Any) -> str:
        return _normalise_locale_value(value)


class EmailRequest(RequestModel):
    """Salary slip email dispatch request."""

    to: str
    subject: str = Field(..., min_length=1, max_length=200)
    html: str | None = None
    variables: dict[str, str | int | float] = Field(default_factory=dict)
    calculation: SalaryRequest | None = None
    locale: str = Field(default="en")

    @field_validator("to", mode="before")
    @classmethod
    def _validate_recipient(cls, value: Any) -> str:
        text = str(value or "").strip()
        if not _EMAIL_PATTERN.match(text):
            raise ValueError("Recipient must be a valid email address")
        return text

    @field_validator("subject", mode="before")
    @classmethod
    def _strip_subject(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("locale", mode="before")
    @classmethod
    def _normalise_locale(cls, value: Any) -> str:
        return _normalise_locale_value(value)


class SummaryLabels(BaseModel):
    """Localized labels for summary fields."""

    model_config = ConfigDict(extra="forbid")

    basic_salary: str
    gross_salary: str
    total_allowances: str
    taxable_allowances: str
    non_taxable_allowances: str
    taxable_income: str
    income_tax: str
    pension_contribution: str
    other_deductions: str
    total_deductions: str
    overtime_pay: str
    net_salary: str
    annual_net_salary: str
    effective_tax_rate: str
    marginal_tax_rate: str


class Summary(BaseModel):
    """Aggregated calculation results."""

    model_config = ConfigDict(extra="forbid")

    basic_salary: float
    gross_salary: float
    total_allowances: float
    taxable_allowances: float
    non_taxable_allowances: float
    taxable_income: float
    income_tax: float
    pension_contribution: float
    other_deductions: float
    total_deductions: float
    overtime_pay: float
    net_salary: float
    annual_net_salary: float
    effective_tax_rate: float
    marginal_tax_rate: float
    labels: SummaryLabels


class BracketDetailEntry(BaseModel):
    """Bracket attribution surfaced for tax visualisations."""

    model_config = ConfigDict(extra="forbid")

    label: str
    min: float
    max: float | None
    rate: float
    taxable_amount: float
    tax_amount: float


class LineItem(BaseModel):
    """Single earnings or deduction row on the payslip."""

    model_config = ConfigDict(extra="forbid")

    type: str
    label: str
    amount: float


class ResponseMeta(BaseModel):
    """Metadata returned alongside the calculation output."""

    model_config = ConfigDict(extra="forbid")

    locale: str
    currency: str
    pension_rate: float


class CalculationResponse(BaseModel):
    """Full response payload produced by the calculation service."""

    model_config = ConfigDict(extra="forbid")

    summary: Summary
    tax_brackets: list[BracketDetailEntry]
    earnings: list[LineItem]
    deductions: list[LineItem]
    meta: ResponseMeta


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if "greater than or equal to 0" in message.lower():
            message = "value cannot be negative"
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid calculation payload: {details}"
