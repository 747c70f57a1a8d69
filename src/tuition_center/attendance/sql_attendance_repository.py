from __future__ import annotations

from datetime import date
from typing import Optional, Sequence, Tuple

from sqlalchemy import case, func, select

from ..core.enums import AttendanceStatus, ScheduleStatus
from ..database.sql_base import SqlRepository
from ..schedules.model import ClassSchedule
from .model import Attendance

ATTENDED = (AttendanceStatus.PRESENT.value, AttendanceStatus.LATE.value)


class SqlAttendanceRepository(SqlRepository[Attendance]):
    model = Attendance

    def get_for(self, *, schedule_id: int, student_id: int) -> Optional[Attendance]:
        stmt = select(Attendance).where(
            Attendance.schedule_id == int(schedule_id), Attendance.student_id == int(student_id)
        )
        return self.session.scalar(stmt)

    def list_for_schedule(self, schedule_id: int) -> Sequence[Attendance]:
        return self.scalars(select(Attendance).where(Attendance.schedule_id == int(schedule_id)))

    def recent_statuses(self, student_id: int, *, limit: int) -> Sequence[str]:
        stmt = (
            select(Attendance.status)
            .where(Attendance.student_id == int(student_id))
            .order_by(Attendance.attendance_date.desc(), Attendance.attendance_id.desc())
            .limit(limit)
        )
        return list(self.session.scalars(stmt))

    def daily_counts(self, *, start: date, end: date, tutor_id: Optional[int] = None) -> Sequence[Tuple[date, int, int]]:
        attended = func.sum(case((Attendance.status.in_(ATTENDED), 1), else_=0))
        stmt = (
            select(Attendance.attendance_date, attended, func.count(Attendance.attendance_id))
            .where(Attendance.attendance_date.between(start, end))
            .group_by(Attendance.attendance_date)
        )
        if tutor_id is not None:
            stmt = stmt.join(ClassSchedule, Attendance.schedule_id == ClassSchedule.schedule_id).where(
                ClassSchedule.tutor_id == int(tutor_id)
            )
        return [(row[0], int(row[1] or 0), int(row[2] or 0)) for row in self.session.execute(stmt)]

    def list_completed_for_student(self, student_id: int) -> Sequence[Attendance]:
        stmt = (
            select(Attendance)
            .join(ClassSchedule, Attendance.schedule_id == ClassSchedule.schedule_id)
            .where(Attendance.student_id == int(student_id), ClassSchedule.status == ScheduleStatus.COMPLETED.value)
            .order_by(Attendance.attendance_date.desc(), Attendance.attendance_id.desc())
        )
        return self.scalars(stmt)
