from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol, Sequence

from .model import SchoolClass, Subject


class ClassRepository(Protocol):
    def list_all(self, *, status: Optional[str] = None) -> Sequence[SchoolClass]:
        raise NotImplementedError

    def get(self, class_id: int) -> Optional[SchoolClass]:
        raise NotImplementedError

    def name_taken(self, class_name: str, *, exclude_id: Optional[int] = None) -> bool:
        raise NotImplementedError

    def add(self, **fields: Any) -> SchoolClass:
        raise NotImplementedError

    def delete(self, school_class: SchoolClass) -> None:
        raise NotImplementedError


class SubjectRepository(Protocol):
    def list_filtered(self, *, class_id: Optional[int] = None, tutor_id: Optional[int] = None) -> Sequence[Subject]:
        raise NotImplementedError

    def get(self, subject_id: int) -> Optional[Subject]:
        raise NotImplementedError

    def get_many(self, subject_ids: Iterable[int]) -> Sequence[Subject]:
        raise NotImplementedError

    def add(self, **fields: Any) -> Subject:
        raise NotImplementedError

    def delete(self, subject: Subject) -> None:
        raise NotImplementedError
