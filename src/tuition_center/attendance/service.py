from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from datetime import date, timedelta
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from ..common.access import actor_student, actor_tutor_id, has_role
from ..common.datetime_utils import today
from ..common.validators import FormValidator
from ..core.constants import ABSENCE_ALERT_STREAK
from ..core.enums import AttendanceStatus, Role, ScheduleStatus
from ..core.exceptions import AuthorizationError, BadRequestError, NotFoundError, ValidationError
from ..notifications.sms import SmsSender
from ..schedules.repository import ScheduleRepository
from ..students.repository import StudentRepository
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

Transaction = Callable[[], AbstractContextManager]

STATUSES = [s.value for s in AttendanceStatus]
OPEN_SCHEDULE_STATUSES = (ScheduleStatus.UPCOMING.value, ScheduleStatus.SCHEDULED.value)


def percentage(attended: int, total: int) -> float:
    return round(attended * 100.0 / total, 2) if total else 0.0


def summarize(records: Iterable[Any]) -> Dict[str, int]:
    """Count one record per schedule; Late counts toward present."""
    by_schedule: Dict[int, str] = {}
    for record in records:
        by_schedule.setdefault(record.schedule_id, record.status)

    statuses = list(by_schedule.values())
    late = statuses.count(AttendanceStatus.LATE.value)
    return {
        "total_scheduled": len(statuses),
        "present_count": statuses.count(AttendanceStatus.PRESENT.value) + late,
        "absent_count": statuses.count(AttendanceStatus.ABSENT.value),
        "late_count": late,
    }


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        schedules: ScheduleRepository,
        students: StudentRepository,
        *,
        sms: SmsSender,
        transaction: Transaction,
        center_name: str = "Tuition Center",
        alert_streak: int = ABSENCE_ALERT_STREAK,
    ):
        self._attendance = attendance
        self._schedules = schedules
        self._students = students
        self._sms = sms
        self._transaction = transaction
        self._center_name = center_name
        self._alert_streak = alert_streak

    def _schedule_for(self, schedule_id: int, actor):
        schedule = self._schedules.get(schedule_id)
        if schedule is None:
            raise NotFoundError("Schedule not found")
        if has_role(actor, Role.TUTOR) and schedule.tutor_id != actor_tutor_id(actor):
            raise AuthorizationError("You can only manage attendance for your own classes")
        return schedule

    def mark(self, data: Mapping[str, Any], *, actor) -> List[Any]:
        v = FormValidator(data)
        schedule_id = v.integer("schedule_id")
        raw_records = data.get("attendance")
        if not isinstance(raw_records, list) or not raw_records:
            v.fail("attendance", "The attendance field is required.")
            raw_records = []

        entries = []
        for index, item in enumerate(raw_records):
            item_v = FormValidator(item if isinstance(item, Mapping) else {})
            student_id = item_v.integer("student_id")
            status = item_v.choice("status", STATUSES)
            for field, messages in item_v.errors.items():
                v.errors.setdefault(f"attendance.{index}.{field}", []).extend(messages)
            if student_id is not None and status is not None:
                entries.append((index, student_id, status))
        v.validate()

        schedule = self._schedule_for(schedule_id, actor)

        students = {}
        for index, student_id, _ in entries:
            student = self._students.get(student_id)
            if student is None:
                raise ValidationError.for_field(f"attendance.{index}.student_id", "The selected student_id is invalid.")
            students[student_id] = student

        marked = []
        with self._transaction():
            for _, student_id, status in entries:
                record = self._attendance.get_for(schedule_id=schedule.schedule_id, student_id=student_id)
                if record is None:
                    record = self._attendance.add(
                        schedule_id=schedule.schedule_id,
                        class_id=schedule.class_id,
                        student_id=student_id,
                        attendance_date=schedule.schedule_date,
                        status=status,
                        marked_by=actor.user_id,
                    )
                else:
                    record.status = status
                    record.marked_by = actor.user_id
                marked.append(record)

            if schedule.status in OPEN_SCHEDULE_STATUSES:
                schedule.status = ScheduleStatus.COMPLETED.value

        absent_ids = [sid for _, sid, status in entries if status == AttendanceStatus.ABSENT.value]
        for student_id in dict.fromkeys(absent_ids):
            self._alert_if_absent_streak(students[student_id])

        logger.info("Attendance marked for schedule %s (%d students)", schedule.schedule_id, len(entries))
        return marked

    def _alert_if_absent_streak(self, student) -> bool:
        statuses = self._attendance.recent_statuses(student.student_id, limit=self._alert_streak)
        if len(statuses) < self._alert_streak or any(s != AttendanceStatus.ABSENT.value for s in statuses):
            return False
        if not student.guardian_contact:
            logger.warning("Absence alert for student %s skipped: no guardian contact", student.student_id)
            return False

        message = (
            f"Dear Parent, {student.full_name} has been absent for the last {self._alert_streak} classes "
            f"at {self._center_name}. Please contact us."
        )
        result = self._sms.send(student.guardian_contact, message)
        if not result.success:
            logger.warning("Absence alert for student %s not delivered: %s", student.student_id, result.message)
        return result.success

    def roster(self, schedule_id: int, *, actor) -> dict:
        schedule = self._schedule_for(schedule_id, actor)
        existing = {a.student_id: a.status for a in self._attendance.list_for_schedule(schedule.schedule_id)}
        students = self._students.search(class_id=schedule.class_id)
        return {
            "schedule": schedule.to_dict(),
            "students": [
                {
                    "student_id": s.student_id,
                    "full_name": s.full_name,
                    "status": existing.get(s.student_id),
                }
                for s in students
            ],
        }

    def analytics(self, *, actor, on: Optional[date] = None) -> dict:
        day = on or today()
        start = day - timedelta(days=6)
        tutor_id = actor_tutor_id(actor) if has_role(actor, Role.TUTOR) else None
        counts = {d: (attended, total) for d, attended, total in self._attendance.daily_counts(
            start=start, end=day, tutor_id=tutor_id
        )}

        overview = []
        for offset in range(7):
            current = start + timedelta(days=offset)
            attended, total = counts.get(current, (0, 0))
            overview.append(
                {
                    "date": current.isoformat(),
                    "day": current.strftime("%a"),
                    "percentage": percentage(attended, total),
                }
            )

        attended, total = counts.get(day, (0, 0))
        return {"today_percentage": percentage(attended, total), "weekly_overview": overview}

    def student_summary(self, *, actor, student_id: Optional[int] = None) -> dict:
        """Attendance totals over Completed schedules only."""
        if has_role(actor, Role.STUDENT):
            student = actor_student(actor)
            if student is None:
                raise NotFoundError("Student profile not found")
        else:
            if student_id is None:
                raise BadRequestError("Student ID is required")
            student = self._students.get(student_id)
            if student is None:
                raise NotFoundError("Student not found")

        records = self._attendance.list_completed_for_student(student.student_id)
        summary = summarize(records)
        summary["student_id"] = student.student_id
        summary["student_name"] = student.full_name
        summary["percentage"] = percentage(summary["present_count"], summary["total_scheduled"])
        summary["records"] = [r.to_dict() for r in records]
        return summary
