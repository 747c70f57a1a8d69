from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Protocol, Sequence

from .model import Fee


class FeeRepository(Protocol):
    def get(self, fee_id: int) -> Optional[Fee]:
        raise NotImplementedError

    def add(self, **fields: Any) -> Fee:
        raise NotImplementedError

    def delete(self, fee: Fee) -> None:
        raise NotImplementedError

    def exists_for(self, *, student_id: int, billing_month: str, exclude_id: Optional[int] = None) -> bool:
        raise NotImplementedError

    def student_ids_billed(self, billing_month: str) -> set:
        raise NotImplementedError

    def list_filtered(
        self,
        *,
        status: Optional[str] = None,
        month: Optional[str] = None,
        class_id: Optional[int] = None,
        student_id: Optional[int] = None,
        search: Optional[str] = None,
        newest_first: bool = True,
    ) -> Sequence[Fee]:
        raise NotImplementedError

    def paginate_for_student(self, student_id: int, *, page: int = 1, per_page: int = 15):
        raise NotImplementedError

    def totals_for_student(self, student_id: int) -> dict:
        """{'total': Decimal, 'paid': Decimal, 'pending': Decimal}"""
        raise NotImplementedError

    def pending_total(self) -> Decimal:
        raise NotImplementedError
