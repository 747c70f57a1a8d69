from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import func, or_, select

from ..classes.model import Subject
from ..database.sql_base import SqlRepository
from ..extensions import db
from ..users.model import User
from .model import Tutor


class SqlTutorRepository(SqlRepository[Tutor]):
    model = Tutor

    def get_by_user_id(self, user_id: int) -> Optional[Tutor]:
        return self.session.scalar(select(Tutor).where(Tutor.user_id == int(user_id)))

    def paginate(self, *, search: Optional[str] = None, status: Optional[str] = None, page: int = 1, per_page: int = 20):
        stmt = select(Tutor).join(User, Tutor.user_id == User.user_id).order_by(Tutor.full_name)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(Tutor.full_name.ilike(pattern), Tutor.email.ilike(pattern)))
        if status == "active":
            stmt = stmt.where(User.is_active.is_(True))
        elif status == "inactive":
            stmt = stmt.where(User.is_active.is_(False))
        return db.paginate(stmt, page=page, per_page=per_page, error_out=False)

    def list_active(self) -> Sequence[Tutor]:
        stmt = (
            select(Tutor)
            .join(User, Tutor.user_id == User.user_id)
            .where(User.is_active.is_(True))
            .order_by(Tutor.full_name)
        )
        return self.scalars(stmt)

    def list_by_subject_name(self, subject_name: str) -> Sequence[Tutor]:
        stmt = (
            select(Tutor)
            .join(Subject, Subject.tutor_id == Tutor.tutor_id)
            .where(Subject.subject_name.ilike(f"%{subject_name}%"))
            .order_by(Tutor.full_name)
        )
        return self.scalars(stmt)

    def count_active(self) -> int:
        stmt = select(func.count()).select_from(Tutor).join(User, Tutor.user_id == User.user_id).where(User.is_active.is_(True))
        return int(self.session.scalar(stmt) or 0)

    def count_joined_between(self, start, end) -> int:
        stmt = select(func.count()).select_from(Tutor).where(Tutor.join_date.between(start, end))
        return int(self.session.scalar(stmt) or 0)
