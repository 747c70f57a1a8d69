from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import Tutor


class TutorRepository(Protocol):
    def get(self, tutor_id: int) -> Optional[Tutor]:
        raise NotImplementedError

    def get_by_user_id(self, user_id: int) -> Optional[Tutor]:
        raise NotImplementedError

    def paginate(self, *, search: Optional[str] = None, status: Optional[str] = None, page: int = 1, per_page: int = 20):
        """Return a Flask-SQLAlchemy Pagination of tutors ordered by name."""
        raise NotImplementedError

    def list_active(self) -> Sequence[Tutor]:
        raise NotImplementedError

    def list_by_subject_name(self, subject_name: str) -> Sequence[Tutor]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def count_active(self) -> int:
        raise NotImplementedError

    def count_joined_between(self, start, end) -> int:
        raise NotImplementedError

    def add(self, **fields: Any) -> Tutor:
        raise NotImplementedError
