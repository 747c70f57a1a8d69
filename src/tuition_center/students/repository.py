from __future__ import annotations

from datetime import date
from typing import Any, Optional, Protocol, Sequence

from .model import Student


class StudentRepository(Protocol):
    def get(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_user_id(self, user_id: int) -> Optional[Student]:
        raise NotImplementedError

    def add(self, **fields: Any) -> Student:
        raise NotImplementedError

    def search(
        self,
        *,
        search: Optional[str] = None,
        grade: Optional[str] = None,
        class_id: Optional[int] = None,
        subject_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[Student]:
        raise NotImplementedError

    def paginate(
        self,
        *,
        search: Optional[str] = None,
        grade: Optional[str] = None,
        class_id: Optional[int] = None,
        subject_ids: Optional[Sequence[int]] = None,
        page: int = 1,
        per_page: int = 20,
    ):
        raise NotImplementedError

    def list_billable(self, *, enrolled_by: date) -> Sequence[Student]:
        """Students with a positive monthly fee enrolled on or before ``enrolled_by``."""
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def count_enrolled_between(self, start: date, end: date) -> int:
        raise NotImplementedError

    def count_by_gender(self, gender: str) -> int:
        raise NotImplementedError
