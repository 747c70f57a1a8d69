from __future__ import annotations

from typing import Iterable, Optional, Sequence

from sqlalchemy import func, select

from ..database.sql_base import SqlRepository
from .model import SchoolClass, Subject


class SqlClassRepository(SqlRepository[SchoolClass]):
    model = SchoolClass

    def list_all(self, *, status: Optional[str] = None) -> Sequence[SchoolClass]:
        stmt = select(SchoolClass).order_by(SchoolClass.class_name)
        if status:
            stmt = stmt.where(SchoolClass.status == status)
        return self.scalars(stmt)

    def name_taken(self, class_name: str, *, exclude_id: Optional[int] = None) -> bool:
        stmt = select(func.count()).select_from(SchoolClass).where(SchoolClass.class_name == class_name)
        if exclude_id is not None:
            stmt = stmt.where(SchoolClass.class_id != int(exclude_id))
        return bool(self.session.scalar(stmt))


class SqlSubjectRepository(SqlRepository[Subject]):
    model = Subject

    def list_filtered(self, *, class_id: Optional[int] = None, tutor_id: Optional[int] = None) -> Sequence[Subject]:
        stmt = select(Subject).order_by(Subject.subject_name)
        if class_id is not None:
            stmt = stmt.where(Subject.class_id == int(class_id))
        if tutor_id is not None:
            stmt = stmt.where(Subject.tutor_id == int(tutor_id))
        return self.scalars(stmt)

    def get_many(self, subject_ids: Iterable[int]) -> Sequence[Subject]:
        ids = [int(i) for i in subject_ids]
        if not ids:
            return []
        return self.scalars(select(Subject).where(Subject.subject_id.in_(ids)).order_by(Subject.subject_id))
