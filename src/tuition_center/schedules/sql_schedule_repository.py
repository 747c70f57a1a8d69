from __future__ import annotations

from datetime import date, time
from typing import Iterable, Optional, Sequence

from sqlalchemy import func, select

from ..database.sql_base import SqlRepository
from ..extensions import db
from .model import ClassSchedule


class SqlScheduleRepository(SqlRepository[ClassSchedule]):
    model = ClassSchedule

    def find_conflict(
        self,
        *,
        tutor_id: int,
        schedule_date: date,
        start_time: time,
        end_time: time,
        exclude_id: Optional[int] = None,
    ) -> Optional[ClassSchedule]:
        stmt = select(ClassSchedule).where(
            ClassSchedule.tutor_id == int(tutor_id),
            ClassSchedule.schedule_date == schedule_date,
            ClassSchedule.start_time < end_time,
            ClassSchedule.end_time > start_time,
        )
        if exclude_id is not None:
            stmt = stmt.where(ClassSchedule.schedule_id != int(exclude_id))
        return self.session.scalars(stmt.limit(1)).first()

    def list_filtered(
        self,
        *,
        class_id: Optional[int] = None,
        tutor_id: Optional[int] = None,
        subject_id: Optional[int] = None,
        subject_ids: Optional[Iterable[int]] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        statuses: Optional[Iterable[str]] = None,
    ) -> Sequence[ClassSchedule]:
        stmt = select(ClassSchedule).order_by(ClassSchedule.schedule_date, ClassSchedule.start_time)
        if class_id is not None:
            stmt = stmt.where(ClassSchedule.class_id == int(class_id))
        if tutor_id is not None:
            stmt = stmt.where(ClassSchedule.tutor_id == int(tutor_id))
        if subject_id is not None:
            stmt = stmt.where(ClassSchedule.subject_id == int(subject_id))
        if subject_ids is not None:
            stmt = stmt.where(ClassSchedule.subject_id.in_(list(subject_ids)))
        if start is not None:
            stmt = stmt.where(ClassSchedule.schedule_date >= start)
        if end is not None:
            stmt = stmt.where(ClassSchedule.schedule_date <= end)
        if statuses is not None:
            stmt = stmt.where(ClassSchedule.status.in_(list(statuses)))
        return self.scalars(stmt)

    def paginate_before(self, *, tutor_id: int, before: date, page: int = 1, per_page: int = 20):
        stmt = (
            select(ClassSchedule)
            .where(ClassSchedule.tutor_id == int(tutor_id), ClassSchedule.schedule_date < before)
            .order_by(ClassSchedule.schedule_date.desc(), ClassSchedule.start_time.desc())
        )
        return db.paginate(stmt, page=page, per_page=per_page, error_out=False)

    def count_on(self, day: date) -> int:
        stmt = select(func.count()).select_from(ClassSchedule).where(ClassSchedule.schedule_date == day)
        return int(self.session.scalar(stmt) or 0)

    def count_for_tutor(self, tutor_id: int, *, status: Optional[str] = None, on_or_after: Optional[date] = None) -> int:
        stmt = select(func.count()).select_from(ClassSchedule).where(ClassSchedule.tutor_id == int(tutor_id))
        if status is not None:
            stmt = stmt.where(ClassSchedule.status == status)
        if on_or_after is not None:
            stmt = stmt.where(ClassSchedule.schedule_date >= on_or_after)
        return int(self.session.scalar(stmt) or 0)
