from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from sqlalchemy import func, or_, select

from ..database.sql_base import SqlRepository
from ..extensions import db
from .model import Student, student_subjects


class SqlStudentRepository(SqlRepository[Student]):
    model = Student

    def get_by_user_id(self, user_id: int) -> Optional[Student]:
        return self.session.scalar(select(Student).where(Student.user_id == int(user_id)))

    def _filtered(
        self,
        *,
        search: Optional[str] = None,
        grade: Optional[str] = None,
        class_id: Optional[int] = None,
        subject_ids: Optional[Sequence[int]] = None,
    ):
        stmt = select(Student).order_by(Student.full_name)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(Student.full_name.ilike(pattern), Student.email.ilike(pattern)))
        if grade:
            stmt = stmt.where(Student.grade == grade)
        if class_id is not None:
            stmt = stmt.where(Student.class_id == int(class_id))
        if subject_ids is not None:
            enrolled = select(student_subjects.c.student_id).where(student_subjects.c.subject_id.in_(list(subject_ids)))
            stmt = stmt.where(Student.student_id.in_(enrolled))
        return stmt

    def search(self, *, search=None, grade=None, class_id=None, subject_ids=None) -> Sequence[Student]:
        return self.scalars(self._filtered(search=search, grade=grade, class_id=class_id, subject_ids=subject_ids))

    def paginate(self, *, search=None, grade=None, class_id=None, subject_ids=None, page: int = 1, per_page: int = 20):
        stmt = self._filtered(search=search, grade=grade, class_id=class_id, subject_ids=subject_ids)
        return db.paginate(stmt, page=page, per_page=per_page, error_out=False)

    def list_billable(self, *, enrolled_by: date) -> Sequence[Student]:
        stmt = (
            select(Student)
            .where(
                Student.total_monthly_fee > 0,
                or_(Student.enrollment_date.is_(None), Student.enrollment_date <= enrolled_by),
            )
            .order_by(Student.student_id)
        )
        return self.scalars(stmt)

    def count_enrolled_between(self, start: date, end: date) -> int:
        stmt = select(func.count()).select_from(Student).where(Student.enrollment_date.between(start, end))
        return int(self.session.scalar(stmt) or 0)

    def count_by_gender(self, gender: str) -> int:
        stmt = select(func.count()).select_from(Student).where(func.lower(Student.gender) == gender.lower())
        return int(self.session.scalar(stmt) or 0)
