"""Utilities for validating payroll configuration data and surfacing issues."""

from __future__ import annotations

import argparse
from collections import Counter
from pathlib import Path
from typing import Mapping, Sequence

from pydantic import ValidationError

from .payroll_config import (
    CONFIG_FILE,
    ConfigurationError,
    CurrencyConfig,
    OvertimeConfig,
    PayrollConfiguration,
    PensionConfig,
    SolverConfig,
    TaxScheduleEntry,
    _load_yaml,
    load_payroll_configuration,
)

_CONTINUITY_TOLERANCE = 1e-6
_MAX_RATE = 0.35


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_tax_schedule(entries: Sequence[TaxScheduleEntry]) -> list[str]:
    errors: list[str] = []

    if not entries:
        return [_format_scope("tax_brackets", "no brackets defined")]

    if entries[0].lower_bound != 0:
        errors.append(_format_scope("tax_brackets[0]", "first bracket must start at 0"))

    labels = [entry.label for entry in entries]
    duplicates = [label for label, count in Counter(labels).items() if count > 1]
    if duplicates:
        errors.append(
            _format_scope("tax_brackets", f"duplicate bracket labels: {sorted(duplicates)}")
        )

    for index, entry in enumerate(entries):
        scope = f"tax_brackets[{index}]"
        if entry.upper_bound is None and index != len(entries) - 1:
            errors.append(_format_scope(scope, "only the final bracket may be open-ended"))
        if not 0 <= entry.rate <= _MAX_RATE:
            errors.append(_format_scope(scope, f"rate must lie between 0 and {_MAX_RATE:g}"))

        if index == 0:
            continue

        previous = entries[index - 1]
        if previous.upper_bound is None:
            continue

        if entry.lower_bound != previous.upper_bound + 1:
            errors.append(
                _format_scope(
                    scope,
                    (
                        f"bracket should start at {previous.upper_bound + 1:g}"
                        f" to follow the previous ceiling"
                    ),
                )
            )

        if entry.rate < previous.rate:
            errors.append(_format_scope(scope, "rates must not decrease between brackets"))

        # The single-bracket formula must agree on both sides of each threshold.
        threshold = previous.upper_bound
        below = threshold * previous.rate - previous.deductible
        above = threshold * entry.rate - entry.deductible
        if abs(below - above) > _CONTINUITY_TOLERANCE:
            errors.append(
                _format_scope(
                    scope,
                    (
                        f"deductible {entry.deductible:g} breaks continuity at "
                        f"{threshold:g} ({below:g} vs {above:g})"
                    ),
                )
            )

    return errors


def _validate_pension(pension: PensionConfig) -> list[str]:
    if pension.employee_rate <= 0:
        return [_format_scope("pension", "employee rate must be positive")]
    return []


def _validate_solver(solver: SolverConfig) -> list[str]:
    errors: list[str] = []
    if solver.max_iterations > 64:
        errors.append(_format_scope("solver", "max_iterations above 64 is never needed"))
    if solver.tolerance >= solver.upper_bound:
        errors.append(_format_scope("solver", "tolerance must be below the upper bound"))
    return errors


def _validate_overtime(overtime: OvertimeConfig) -> list[str]:
    errors: list[str] = []
    for key, multiplier in overtime.multipliers.items():
        if multiplier < 1:
            errors.append(
                _format_scope(f"overtime.multipliers.{key}", "premium must be at least 1.0")
            )
    return errors


def _validate_exchange_rates(currency: CurrencyConfig) -> list[str]:
    errors: list[str] = []
    rates: Mapping[str, float] = currency.exchange_rates
    for code, rate in rates.items():
        scope = f"currency.exchange_rates.{code}"
        if len(code) != 3 or not code.isalpha():
            errors.append(_format_scope(scope, "currency codes must be three letters"))
        if rate <= 0:
            errors.append(_format_scope(scope, "rates must be positive"))
    if currency.code.upper() in rates:
        errors.append(
            _format_scope("currency", "exchange rates must not include the home currency")
        )
    return errors


def validate_payroll_configuration(config: PayrollConfiguration) -> list[str]:
    """Return a list of validation issues for the provided configuration."""

    errors: list[str] = []

    errors.extend(_validate_tax_schedule(config.tax_brackets))
    errors.extend(_validate_pension(config.pension))
    errors.extend(_validate_solver(config.solver))
    errors.extend(_validate_overtime(config.overtime))
    errors.extend(_validate_exchange_rates(config.currency))

    return errors


def validate_file(path: Path) -> list[str]:
    """Load ``path`` as a payroll configuration and return any issues."""

    raw_config = _load_yaml(path)
    try:
        config = PayrollConfiguration.model_validate(raw_config)
    except ValidationError as error:
        return [_format_scope(path.name, str(error))]
    return validate_payroll_configuration(config)


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate the payroll configuration and report issues."
    )
    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help=f"Configuration files to validate (defaults to {CONFIG_FILE.name})",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    if not args.paths:
        try:
            issues = validate_payroll_configuration(load_payroll_configuration())
        except (FileNotFoundError, ConfigurationError) as error:
            print(f"[{CONFIG_FILE.name}] failed to load configuration: {error}")
            return 1
        return _report(CONFIG_FILE.name, issues)

    exit_code = 0
    for path in args.paths:
        try:
            issues = validate_file(path)
        except (OSError, ConfigurationError) as error:
            print(f"[{path.name}] failed to load configuration: {error}")
            exit_code = 1
            continue
        exit_code = max(exit_code, _report(path.name, issues))

    return exit_code


def _report(name: str, issues: Sequence[str]) -> int:
    if issues:
        print(f"[{name}] {len(issues)} issue(s) detected:")
        for issue in issues:
            print(f"  - {issue}")
        return 1
    print(f"[{name}] OK")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
