"""Pydantic models describing the payroll configuration schema."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from typing_extensions import Self


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class TaxBracket(ImmutableModel):
    """Represents a single PAYE bracket as rendered to callers."""

    lower_bound: float = Field(alias="min")
    upper_bound: float | None = Field(default=None, alias="max")
    rate: float
    label: str

    @model_validator(mode="after")
    def _validate_values(self) -> Self:
        if self.rate < 0 or self.rate > 0.35:
            raise ConfigurationError("Tax rates must lie between 0 and 0.35")
        if self.lower_bound < 0:
            raise ConfigurationError("Bracket lower bounds must be non-negative")
        if self.upper_bound is not None and self.upper_bound < self.lower_bound:
            raise ConfigurationError("Bracket upper bounds must not precede lower bounds")
        return self

    def contains(self, amount: float) -> bool:
        """Return ``True`` when ``amount`` falls at or below this bracket's ceiling."""

        return self.upper_bound is None or amount <= self.upper_bound


class TaxScheduleEntry(ImmutableModel):
    """YAML representation of a bracket together with its deductible offset."""

    lower_bound: float = Field(alias="min")
    upper_bound: float | None = Field(default=None, alias="max")
    rate: float
    label: str
    deductible: float = Field(default=0.0, ge=0)

    def to_bracket(self) -> TaxBracket:
        return TaxBracket(
            min=self.lower_bound,
            max=self.upper_bound,
            rate=self.rate,
            label=self.label,
        )


class PensionConfig(ImmutableModel):
    """Statutory employee pension contribution."""

    employee_rate: float = Field(ge=0, le=1)


class AllowanceConfig(ImmutableModel):
    """Exemption applied to each allowance flagged as taxable."""

    exemption_per_allowance: float = Field(ge=0)


class SolverConfig(ImmutableModel):
    """Bounds for the net-to-gross binary search."""

    upper_bound: float = Field(gt=0)
    max_iterations: int = Field(gt=0)
    tolerance: float = Field(ge=0)


class OvertimeConfig(ImmutableModel):
    """Working-time assumptions and premium multipliers for overtime pay."""

    days_per_month: int = Field(gt=0)
    hours_per_day: int = Field(gt=0)
    multipliers: Mapping[str, float]
    default_multiplier: str

    @field_validator("multipliers", mode="before")
    @classmethod
    def _coerce_multipliers(cls, value: Any) -> Mapping[str, float]:
        if not isinstance(value, Mapping) or not value:
            raise ConfigurationError("Overtime multipliers must be a non-empty mapping")
        return {str(key): float(val) for key, val in value.items()}

    @model_validator(mode="after")
    def _validate_default(self) -> Self:
        if self.default_multiplier not in self.multipliers:
            raise ConfigurationError(
                f"Default overtime multiplier '{self.default_multiplier}' is not defined"
            )
        return self

    @property
    def hours_per_month(self) -> int:
        return self.days_per_month * self.hours_per_day


class CurrencyConfig(ImmutableModel):
    """Home currency code and indicative conversion rates."""

    code: str = Field(min_length=3, max_length=3)
    exchange_rates: Mapping[str, float] = Field(default_factory=dict)

    @field_validator("exchange_rates", mode="before")
    @classmethod
    def _coerce_rates(cls, value: Any) -> Mapping[str, float]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ConfigurationError("Exchange rates must be a mapping of currency codes")
        return {str(key).upper(): float(val) for key, val in value.items()}


class PayrollConfiguration(ImmutableModel):
    """Complete payroll configuration loaded from ``payroll.yaml``."""

    meta: Mapping[str, Any] = Field(default_factory=dict)
    tax_brackets: tuple[TaxScheduleEntry, ...]
    pension: PensionConfig
    allowances: AllowanceConfig
    solver: SolverConfig
    overtime: OvertimeConfig
    currency: CurrencyConfig

    @model_validator(mode="after")
    def _validate_schedule(self) -> Self:
        if not self.tax_brackets:
            raise ConfigurationError("At least one tax bracket must be configured")
        if self.tax_brackets[-1].upper_bound is not None:
            raise ConfigurationError("The final tax bracket must be open-ended")
        return self

    @property
    def brackets(self) -> tuple[TaxBracket, ...]:
        return tuple(entry.to_bracket() for entry in self.tax_brackets)

    @property
    def deductibles(self) -> Mapping[float | None, float]:
        """Deductible offsets keyed by each bracket's upper threshold."""

        return MappingProxyType(
            {entry.upper_bound: entry.deductible for entry in self.tax_brackets}
        )


__all__ = [
    "AllowanceConfig",
    "ConfigurationError",
    "CurrencyConfig",
    "ImmutableModel",
    "OvertimeConfig",
    "PayrollConfiguration",
    "PensionConfig",
    "SolverConfig",
    "TaxBracket",
    "TaxScheduleEntry",
]
