from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from datetime import date
from typing import Any, Callable, Dict, Mapping, Optional

from werkzeug.datastructures import FileStorage
from werkzeug.security import generate_password_hash

from ..classes.repository import ClassRepository, SubjectRepository
from ..classes.service import require_subjects
from ..common.access import actor_student, actor_tutor_id, has_role, is_admin
from ..common.datetime_utils import month_key, parse_month, today
from ..common.uploads import UploadStore
from ..common.validators import FormValidator
from ..core.constants import PASSWORD_MIN_LENGTH, STUDENTS_PER_PAGE
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..schedules.repository import ScheduleRepository
from ..users.repository import UserRepository
from .repository import StudentRepository

logger = logging.getLogger(__name__)

Transaction = Callable[[], AbstractContextManager]

GENDERS = ["male", "female", "other", "Male", "Female", "Other"]


def read_student_profile(v: FormValidator, *, partial: bool) -> Dict[str, Any]:
    """Validate the student profile columns present in the payload."""
    fields: Dict[str, Any] = {}

    def wants(name: str) -> bool:
        return v.has(name) or not partial

    if wants("full_name"):
        fields["full_name"] = v.string("full_name")
    if wants("address"):
        fields["address"] = v.string("address", max_length=500)
    if wants("gender"):
        fields["gender"] = v.choice("gender", GENDERS)
    if wants("contact_no"):
        fields["contact_no"] = v.string("contact_no", max_length=20)
    if wants("guardian_name"):
        fields["guardian_name"] = v.string("guardian_name")
    if wants("guardian_contact"):
        fields["guardian_contact"] = v.string("guardian_contact", max_length=20)
    if wants("emergency_contact"):
        fields["emergency_contact"] = v.string("emergency_contact", max_length=20)
    if v.has("email"):
        fields["email"] = v.email("email")
    if v.has("nic"):
        fields["nic"] = v.string("nic", required=False, max_length=20)
    if v.has("dob"):
        fields["dob"] = v.date("dob", required=False)
    if v.has("enrollment_date"):
        fields["enrollment_date"] = v.date("enrollment_date", required=False)
    return fields


class StudentService:
    def __init__(
        self,
        students: StudentRepository,
        users: UserRepository,
        classes: ClassRepository,
        subjects: SubjectRepository,
        schedules: ScheduleRepository,
        *,
        uploads: UploadStore,
        transaction: Transaction,
    ):
        self._students = students
        self._users = users
        self._classes = classes
        self._subjects = subjects
        self._schedules = schedules
        self._uploads = uploads
        self._transaction = transaction

    def get(self, student_id: int):
        student = self._students.get(student_id)
        if student is None:
            raise NotFoundError("Student not found")
        return student

    def get_for(self, student_id: int, *, actor):
        """Students may only read their own record."""
        student = self.get(student_id)
        if has_role(actor, Role.STUDENT) and student.user_id != actor.user_id:
            raise AuthorizationError("Unauthorized access")
        return student

    def own(self, actor):
        student = actor_student(actor)
        if student is None:
            raise NotFoundError("Student profile not found")
        return student

    def search(
        self,
        *,
        actor,
        search: Optional[str] = None,
        grade: Optional[str] = None,
        class_id: Optional[int] = None,
        all_rows: bool = False,
        page: int = 1,
    ):
        """Admins search everyone; tutors only students enrolled in their subjects."""
        subject_ids = None
        tutor_id = actor_tutor_id(actor)
        if tutor_id is not None:
            subject_ids = [s.subject_id for s in self._subjects.list_filtered(tutor_id=tutor_id)]

        if all_rows:
            return self._students.search(search=search, grade=grade, class_id=class_id, subject_ids=subject_ids)
        return self._students.paginate(
            search=search,
            grade=grade,
            class_id=class_id,
            subject_ids=subject_ids,
            page=page,
            per_page=STUDENTS_PER_PAGE,
        )

    def update(self, student_id: int, data: Mapping[str, Any], *, photo: Optional[FileStorage] = None):
        student = self.get(student_id)
        user = student.user

        v = FormValidator(data)
        fields = read_student_profile(v, partial=True)

        username = v.string("username", max_length=100) if v.has("username") else None
        if username and self._users.username_taken(username, exclude_user_id=user.user_id):
            v.fail("username", "The username has already been taken.")
        password = v.string("password", required=False, min_length=PASSWORD_MIN_LENGTH, max_length=None)

        school_class = None
        if v.has("class_id"):
            class_id = v.integer("class_id")
            if class_id is not None:
                school_class = self._classes.get(class_id)
                if school_class is None:
                    v.fail("class_id", "The selected class_id is invalid.")

        subject_ids = (v.id_list("subject_ids", required=False) or []) if v.has("subject_ids") else None
        v.validate()
        subjects = require_subjects(self._subjects, subject_ids) if subject_ids is not None else None

        new_photo = self._uploads.save_photo(photo) if photo and photo.filename else None
        old_photo = student.profile_photo

        try:
            with self._transaction():
                for key, value in fields.items():
                    setattr(student, key, value)
                if school_class is not None:
                    student.class_id = school_class.class_id
                    student.school_class = school_class
                    student.grade = school_class.class_name
                if subjects is not None:
                    student.subjects = list(subjects)
                    student.recompute_monthly_fee()
                if username:
                    user.username = username
                if password:
                    user.password = generate_password_hash(password)
                if new_photo:
                    student.profile_photo = new_photo
        except Exception:
            self._uploads.delete(new_photo)
            raise

        if new_photo and old_photo:
            self._uploads.delete(old_photo)
        logger.info("Student %s updated", student_id)
        return student

    def enroll(self, student_id: int, data: Mapping[str, Any]):
        student = self.get(student_id)
        v = FormValidator(data)
        subject_ids = v.id_list("subject_ids")
        v.validate()
        subjects = require_subjects(self._subjects, subject_ids)

        with self._transaction():
            current = {s.subject_id for s in student.subjects}
            for subject in subjects:
                if subject.subject_id not in current:
                    student.subjects.append(subject)
            student.recompute_monthly_fee()
        return student

    def timetable(self, student, *, start: Optional[date] = None, end: Optional[date] = None):
        subject_ids = [s.subject_id for s in student.subjects]
        if not subject_ids:
            return []
        return self._schedules.list_filtered(subject_ids=subject_ids, start=start, end=end)

    def timetable_for(self, student_id: int, *, actor, start: Optional[date] = None, end: Optional[date] = None):
        return self.timetable(self.get_for(student_id, actor=actor), start=start, end=end)

    def stats(self, *, actor) -> dict:
        if not is_admin(actor):
            raise AuthorizationError("Unauthorized access")
        first, last = parse_month(month_key(today()))
        return {
            "total": self._students.count(),
            "this_month": self._students.count_enrolled_between(first, last),
            "male": self._students.count_by_gender("male"),
            "female": self._students.count_by_gender("female"),
        }
