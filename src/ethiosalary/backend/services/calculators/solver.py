"""Net-to-gross inversion of :func:`calculate_salary`."""

from __future__ import annotations

import math

from ethiosalary.backend.app.models import SalaryInputs
from ethiosalary.backend.config.payroll_config import load_payroll_configuration

from .salary import calculate_salary


def calculate_required_gross_salary(
    desired_net_salary: float, allowances: SalaryInputs
) -> int:
    """Return the basic salary that yields ``desired_net_salary``.

    ``allowances`` supplies the fixed allowance and deduction profile; its
    ``gross_salary`` is replaced by each candidate. The search is an integer
    bisection capped by the configured iteration count and tolerance, so the
    result is a best-effort estimate rather than an exact inverse. Nothing is
    raised when no candidate lands within tolerance; the midpoint of the final
    search window is returned instead.
    """

    if math.isnan(desired_net_salary) or desired_net_salary <= 0:
        return 0

    solver = load_payroll_configuration().solver

    low = 0
    high = min(desired_net_salary * 2, solver.upper_bound)
    iterations = 0

    while low <= high and iterations < solver.max_iterations:
        mid = math.floor((low + high) / 2)
        calculation = calculate_salary(allowances.model_copy(update={"gross_salary": mid}))
        difference = calculation.net_salary - desired_net_salary

        if abs(difference) <= solver.tolerance:
            return mid

        if difference < 0:
            low = mid + 1
        else:
            high = mid - 1

        iterations += 1

    return math.floor((low + high) / 2)


__all__ = ["calculate_required_gross_salary"]
