from __future__ import annotations

from decimal import Decimal

from .base import SalaryCalculator

CENTS = Decimal("0.01")


class StandardSalaryCalculator(SalaryCalculator):
    """Standard rule: base + allowances + bonus - deductions."""

    def net_salary(self, *, base_amount: Decimal, allowances: Decimal, bonus: Decimal, deductions: Decimal) -> Decimal:
        total = Decimal(base_amount or 0) + Decimal(allowances or 0) + Decimal(bonus or 0) - Decimal(deductions or 0)
        return total.quantize(CENTS)
