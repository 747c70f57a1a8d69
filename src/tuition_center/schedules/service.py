from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from datetime import date
from typing import Any, Callable, Mapping, Optional

from ..classes.repository import ClassRepository, SubjectRepository
from ..common.access import actor_student, actor_tutor_id, has_role, is_admin
from ..common.datetime_utils import format_clock, range_bounds, today
from ..common.validators import FormValidator
from ..core.enums import Role, ScheduleStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError
from ..tutors.repository import TutorRepository
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)

Transaction = Callable[[], AbstractContextManager]

STATUSES = [s.value for s in ScheduleStatus]


class ScheduleService:
    def __init__(
        self,
        schedules: ScheduleRepository,
        classes: ClassRepository,
        subjects: SubjectRepository,
        tutors: TutorRepository,
        *,
        transaction: Transaction,
    ):
        self._schedules = schedules
        self._classes = classes
        self._subjects = subjects
        self._tutors = tutors
        self._transaction = transaction

    def get(self, schedule_id: int):
        schedule = self._schedules.get(schedule_id)
        if schedule is None:
            raise NotFoundError("Schedule not found")
        return schedule

    def list_for(
        self,
        *,
        actor,
        class_id: Optional[int] = None,
        tutor_id: Optional[int] = None,
        subject_id: Optional[int] = None,
        on: Optional[date] = None,
        range_name: Optional[str] = None,
    ):
        """Students see their class, tutors their own classes, admins everything."""
        if has_role(actor, Role.STUDENT):
            student = actor_student(actor)
            if student is None or student.class_id is None:
                return []
            class_id = student.class_id
        elif has_role(actor, Role.TUTOR):
            tutor_id = actor_tutor_id(actor)
            if tutor_id is None:
                return []

        start = end = on
        if on is None:
            bounds = range_bounds(range_name, on=today())
            if bounds:
                start, end = bounds

        return self._schedules.list_filtered(
            class_id=class_id, tutor_id=tutor_id, subject_id=subject_id, start=start, end=end
        )

    def options(self, *, actor) -> dict:
        tutor_id = actor_tutor_id(actor)
        if tutor_id is not None:
            subjects = self._subjects.list_filtered(tutor_id=tutor_id)
            class_ids = {s.class_id for s in subjects}
            classes = [c for c in self._classes.list_all() if c.class_id in class_ids]
            tutor = self._tutors.get(tutor_id)
            tutors = [tutor] if tutor else []
        else:
            subjects = self._subjects.list_filtered()
            classes = self._classes.list_all()
            tutors = self._tutors.list_active()
        return {
            "classes": [{"class_id": c.class_id, "class_name": c.class_name} for c in classes],
            "subjects": [
                {"subject_id": s.subject_id, "subject_name": s.subject_name, "class_id": s.class_id, "tutor_id": s.tutor_id}
                for s in subjects
            ],
            "tutors": [{"tutor_id": t.tutor_id, "full_name": t.full_name} for t in tutors],
            "statuses": STATUSES,
        }

    def _check_refs(self, v: FormValidator, *, class_id: Optional[int], subject_id: Optional[int], tutor_id: Optional[int]):
        subject = None
        if class_id is not None and self._classes.get(class_id) is None:
            v.fail("class_id", "The selected class_id is invalid.")
        if subject_id is not None:
            subject = self._subjects.get(subject_id)
            if subject is None:
                v.fail("subject_id", "The selected subject_id is invalid.")
            elif class_id is not None and subject.class_id != class_id:
                v.fail("subject_id", "The subject does not belong to the selected class.")
        if tutor_id is not None and self._tutors.get(tutor_id) is None:
            v.fail("tutor_id", "The selected tutor_id is invalid.")
        return subject

    def _resolve_tutor(self, actor, requested: Optional[int], fallback: Optional[int]) -> Optional[int]:
        own = actor_tutor_id(actor)
        if has_role(actor, Role.TUTOR):
            if own is None:
                raise AuthorizationError("Tutor profile not found")
            if requested is not None and requested != own:
                raise AuthorizationError("Tutors can only schedule their own classes")
            return own
        return requested if requested is not None else fallback

    def _ensure_free(self, *, tutor_id: Optional[int], schedule_date, start_time, end_time, exclude_id=None) -> None:
        if tutor_id is None:
            return
        clash = self._schedules.find_conflict(
            tutor_id=tutor_id,
            schedule_date=schedule_date,
            start_time=start_time,
            end_time=end_time,
            exclude_id=exclude_id,
        )
        if clash is not None:
            raise ConflictError(
                f"Tutor already has a class from {format_clock(clash.start_time)} to "
                f"{format_clock(clash.end_time)} on {schedule_date.isoformat()}"
            )

    def create(self, data: Mapping[str, Any], *, actor):
        v = FormValidator(data)
        class_id = v.integer("class_id")
        subject_id = v.integer("subject_id")
        requested_tutor = v.integer("tutor_id", required=False)
        schedule_date = v.date("schedule_date")
        start_time = v.time("start_time")
        end_time = v.time("end_time")
        status = v.choice("status", STATUSES, required=False) or ScheduleStatus.UPCOMING.value
        if start_time and end_time and end_time <= start_time:
            v.fail("end_time", "The end_time must be a time after start_time.")
        subject = self._check_refs(v, class_id=class_id, subject_id=subject_id, tutor_id=requested_tutor)
        v.validate()

        tutor_id = self._resolve_tutor(actor, requested_tutor, subject.tutor_id if subject else None)
        self._ensure_free(tutor_id=tutor_id, schedule_date=schedule_date, start_time=start_time, end_time=end_time)

        with self._transaction():
            schedule = self._schedules.add(
                class_id=class_id,
                subject_id=subject_id,
                tutor_id=tutor_id,
                schedule_date=schedule_date,
                start_time=start_time,
                end_time=end_time,
                status=status,
            )
        logger.info("Schedule %s created for tutor %s on %s", schedule.schedule_id, tutor_id, schedule_date)
        return schedule

    def _check_owner(self, schedule, actor) -> None:
        if is_admin(actor):
            return
        if has_role(actor, Role.TUTOR) and schedule.tutor_id == actor_tutor_id(actor):
            return
        raise AuthorizationError("Unauthorized access")

    def update(self, schedule_id: int, data: Mapping[str, Any], *, actor):
        schedule = self.get(schedule_id)
        self._check_owner(schedule, actor)

        v = FormValidator(data)
        class_id = v.integer("class_id") if v.has("class_id") else schedule.class_id
        subject_id = v.integer("subject_id") if v.has("subject_id") else schedule.subject_id
        requested_tutor = v.integer("tutor_id", required=False) if v.has("tutor_id") else None
        schedule_date = v.date("schedule_date") if v.has("schedule_date") else schedule.schedule_date
        start_time = v.time("start_time") if v.has("start_time") else schedule.start_time
        end_time = v.time("end_time") if v.has("end_time") else schedule.end_time
        status = v.choice("status", STATUSES) if v.has("status") else schedule.status
        if start_time and end_time and end_time <= start_time:
            v.fail("end_time", "The end_time must be a time after start_time.")
        self._check_refs(v, class_id=class_id, subject_id=subject_id, tutor_id=requested_tutor)
        v.validate()

        tutor_id = self._resolve_tutor(actor, requested_tutor, schedule.tutor_id)
        moved = (
            tutor_id != schedule.tutor_id
            or schedule_date != schedule.schedule_date
            or start_time != schedule.start_time
            or end_time != schedule.end_time
        )
        if moved:
            self._ensure_free(
                tutor_id=tutor_id,
                schedule_date=schedule_date,
                start_time=start_time,
                end_time=end_time,
                exclude_id=schedule.schedule_id,
            )

        with self._transaction():
            schedule.class_id = class_id
            schedule.subject_id = subject_id
            schedule.tutor_id = tutor_id
            schedule.schedule_date = schedule_date
            schedule.start_time = start_time
            schedule.end_time = end_time
            schedule.status = status
        return schedule

    def delete(self, schedule_id: int, *, actor) -> None:
        schedule = self.get(schedule_id)
        self._check_owner(schedule, actor)
        with self._transaction():
            self._schedules.delete(schedule)
        logger.info("Schedule %s deleted", schedule_id)
