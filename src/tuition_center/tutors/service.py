from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from datetime import date, timedelta
from typing import Any, Callable, Dict, Mapping, Optional

from werkzeug.datastructures import FileStorage

from ..common.access import is_admin, require_role
from ..common.datetime_utils import month_key, parse_month, today
from ..common.uploads import UploadStore
from ..common.validators import FormValidator
from ..core.constants import HISTORY_PER_PAGE, TUTORS_PER_PAGE
from ..core.enums import Role, ScheduleStatus
from ..core.exceptions import AuthorizationError, NotFoundError
from ..schedules.repository import ScheduleRepository
from ..users.repository import UserRepository
from .repository import TutorRepository

logger = logging.getLogger(__name__)

Transaction = Callable[[], AbstractContextManager]


def read_tutor_profile(v: FormValidator, *, partial: bool) -> Dict[str, Any]:
    """Validate the tutor profile columns present in the payload."""
    fields: Dict[str, Any] = {}

    def wants(name: str) -> bool:
        return v.has(name) or not partial

    if wants("full_name"):
        fields["full_name"] = v.string("full_name")
    if wants("address"):
        fields["address"] = v.string("address", max_length=500)
    if wants("gender"):
        fields["gender"] = v.choice("gender", ["male", "female", "other", "Male", "Female", "Other"])
    if wants("contact_no"):
        fields["contact_no"] = v.string("contact_no", max_length=20)
    if v.has("email"):
        fields["email"] = v.email("email")
    if v.has("nic"):
        fields["nic"] = v.string("nic", required=False, max_length=20)
    if v.has("emergency_contact"):
        fields["emergency_contact"] = v.string("emergency_contact", required=False, max_length=20)
    if v.has("basic_salary"):
        fields["basic_salary"] = v.number("basic_salary", required=False)
    if v.has("dob"):
        fields["dob"] = v.date("dob", required=False)
    if v.has("join_date"):
        fields["join_date"] = v.date("join_date", required=False)
    if v.has("experience"):
        fields["experience"] = v.string("experience", required=False)
    if v.has("qualification"):
        fields["qualification"] = v.string("qualification", required=False)
    return fields


class TutorService:
    def __init__(
        self,
        tutors: TutorRepository,
        users: UserRepository,
        schedules: ScheduleRepository,
        *,
        uploads: UploadStore,
        transaction: Transaction,
    ):
        self._tutors = tutors
        self._users = users
        self._schedules = schedules
        self._uploads = uploads
        self._transaction = transaction

    def get(self, tutor_id: int):
        tutor = self._tutors.get(tutor_id)
        if tutor is None:
            raise NotFoundError("Tutor not found")
        return tutor

    def get_for(self, tutor_id: int, *, actor):
        """Admins see any tutor, tutors only themselves."""
        tutor = self.get(tutor_id)
        if not is_admin(actor) and tutor.user_id != actor.user_id:
            raise AuthorizationError("Unauthorized access")
        return tutor

    def profile_of(self, actor):
        require_role(actor, Role.TUTOR)
        tutor = self._tutors.get_by_user_id(actor.user_id)
        if tutor is None:
            raise NotFoundError("Tutor profile not found")
        return tutor

    def search(self, *, search: Optional[str] = None, status: Optional[str] = None, page: int = 1):
        return self._tutors.paginate(search=search, status=status, page=page, per_page=TUTORS_PER_PAGE)

    def active(self):
        return self._tutors.list_active()

    def by_subject(self, subject_name: Optional[str]):
        if not subject_name:
            return self._tutors.list_active()
        return self._tutors.list_by_subject_name(subject_name)

    def update(self, tutor_id: int, data: Mapping[str, Any], *, actor, photo: Optional[FileStorage] = None):
        tutor = self.get_for(tutor_id, actor=actor)

        v = FormValidator(data)
        fields = read_tutor_profile(v, partial=True)
        status = v.choice("status", ["active", "inactive"], required=False) if v.has("status") else None
        if not is_admin(actor):
            # salary and account status are admin decisions
            fields.pop("basic_salary", None)
            status = None
        v.validate()

        new_photo = self._uploads.save_photo(photo) if photo and photo.filename else None
        old_photo = tutor.profile_photo

        try:
            with self._transaction():
                for key, value in fields.items():
                    setattr(tutor, key, value)
                if status is not None:
                    tutor.user.is_active = status == "active"
                if new_photo:
                    tutor.profile_photo = new_photo
        except Exception:
            self._uploads.delete(new_photo)
            raise

        if new_photo and old_photo:
            self._uploads.delete(old_photo)
        return tutor

    def delete(self, tutor_id: int) -> None:
        tutor = self.get(tutor_id)
        user = tutor.user
        photo = tutor.profile_photo
        materials = [m.file_path for m in tutor.materials]
        with self._transaction():
            self._users.delete(user)
        for path in [photo, *materials]:
            self._uploads.delete(path)
        logger.info("Tutor %s and user %s deleted", tutor_id, user.user_id)

    def stats_overview(self) -> dict:
        first, last = parse_month(month_key(today()))
        total = self._tutors.count()
        active = self._tutors.count_active()
        return {
            "total": total,
            "active": active,
            "inactive": total - active,
            "new_this_month": self._tutors.count_joined_between(first, last),
        }

    def stats_for(self, tutor_id: int, *, actor) -> dict:
        tutor = self.get_for(tutor_id, actor=actor)
        day = today()
        student_ids = {s.student_id for subject in tutor.subjects for s in subject.students}
        return {
            "tutor_id": tutor.tutor_id,
            "total_schedules": self._schedules.count_for_tutor(tutor.tutor_id),
            "completed_schedules": self._schedules.count_for_tutor(tutor.tutor_id, status=ScheduleStatus.COMPLETED.value),
            "upcoming_schedules": self._schedules.count_for_tutor(
                tutor.tutor_id, status=ScheduleStatus.UPCOMING.value, on_or_after=day
            ),
            "subjects": len(tutor.subjects),
            "students": len(student_ids),
            "materials": len(tutor.materials),
        }

    def history(self, tutor_id: int, *, actor, page: int = 1):
        tutor = self.get_for(tutor_id, actor=actor)
        return self._schedules.paginate_before(
            tutor_id=tutor.tutor_id, before=today(), page=page, per_page=HISTORY_PER_PAGE
        )

    def my_classes(self, *, actor, start: Optional[date] = None, end: Optional[date] = None):
        tutor = self.profile_of(actor)
        start = start or today()
        end = end or (start + timedelta(days=7))
        return self._schedules.list_filtered(tutor_id=tutor.tutor_id, start=start, end=end)

    def today_classes(self, *, actor):
        tutor = self.profile_of(actor)
        day = today()
        return self._schedules.list_filtered(tutor_id=tutor.tutor_id, start=day, end=day)
