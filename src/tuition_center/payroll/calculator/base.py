from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal


class SalaryCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def net_salary(self, *, base_amount: Decimal, allowances: Decimal, bonus: Decimal, deductions: Decimal) -> Decimal:
        raise NotImplementedError
