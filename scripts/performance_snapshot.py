#!/usr/bin/env python3
"""Time the salary engine, the net-to-gross solver and the full API service."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from time import perf_counter
from typing import Callable

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from ethiosalary.backend.app.models import SalaryInputs  # noqa: E402
from ethiosalary.backend.services import calculate_payroll  # noqa: E402
from ethiosalary.backend.services.calculators import (  # noqa: E402
    calculate_required_gross_salary,
    calculate_salary,
)

SAMPLE_PAYLOAD = {
    "locale": "en",
    "gross_salary": 18000,
    "transport": {"amount": 1500, "taxable": True},
    "housing": {"percentage": 20, "taxable": True},
    "medical": {"amount": 500},
    "other_allowances": [{"name": "Hardship", "amount": 900, "taxable": True}],
    "overtime": {"hours": 10, "rate": "holiday_night"},
    "union_dues": 50,
    "loan_deductions": [{"name": "Car loan", "amount": 1200}],
}

SAMPLE_INPUTS = SalaryInputs(
    gross_salary=18000,
    transport_allowance=1500,
    transport_taxable=True,
    housing_allowance=3600,
    housing_taxable=True,
    medical_allowance=500,
)


def _measure(func: Callable[[], object], iterations: int) -> dict[str, float]:
    func()  # warm caches
    start = perf_counter()
    for _ in range(iterations):
        func()
    elapsed = perf_counter() - start
    return {
        "iterations": iterations,
        "total_ms": elapsed * 1000,
        "average_ms": (elapsed / iterations) * 1000,
    }


def main() -> None:
    iterations = int(os.getenv("ETHIOSALARY_PROFILE_ITERATIONS", "200"))
    report = {
        "engine": _measure(lambda: calculate_salary(SAMPLE_INPUTS), iterations),
        "solver": _measure(
            lambda: calculate_required_gross_salary(15000, SAMPLE_INPUTS),
            iterations,
        ),
        "service": _measure(lambda: calculate_payroll(dict(SAMPLE_PAYLOAD)), iterations),
    }
    print(json.dumps(report, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
