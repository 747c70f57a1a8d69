from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Protocol, Sequence

from .model import Salary


class SalaryRepository(Protocol):
    def get(self, salary_id: int) -> Optional[Salary]:
        raise NotImplementedError

    def add(self, **fields: Any) -> Salary:
        raise NotImplementedError

    def delete(self, salary: Salary) -> None:
        raise NotImplementedError

    def exists_for(self, *, tutor_id: int, month: str, exclude_id: Optional[int] = None) -> bool:
        raise NotImplementedError

    def tutor_ids_billed(self, month: str) -> set:
        """Tutors that already have a salary row for ``month``."""
        raise NotImplementedError

    def list_filtered(
        self, *, month: Optional[str] = None, status: Optional[str] = None, tutor_id: Optional[int] = None
    ) -> Sequence[Salary]:
        raise NotImplementedError

    def paginate_for_tutor(self, tutor_id: int, *, page: int = 1, per_page: int = 15):
        raise NotImplementedError

    def totals_for_tutor(self, tutor_id: int) -> dict:
        """{'total_earned': Decimal, 'pending_amount': Decimal}"""
        raise NotImplementedError
