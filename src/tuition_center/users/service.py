from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from typing import Any, Callable, Mapping, Optional, Tuple

from werkzeug.datastructures import FileStorage
from werkzeug.security import check_password_hash, generate_password_hash

from ..classes.repository import ClassRepository, SubjectRepository
from ..classes.service import require_subjects
from ..common.datetime_utils import month_key, month_label, parse_month, today
from ..common.uploads import UploadStore
from ..common.validators import FormValidator
from ..core.constants import PASSWORD_MIN_LENGTH
from ..core.enums import FeeStatus, Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..fees.repository import FeeRepository
from ..notifications.sms import SmsSender
from ..schedules.repository import ScheduleRepository
from ..security.tokens import TokenClaims, TokenService
from ..students.repository import StudentRepository
from ..students.service import read_student_profile
from ..tutors.repository import TutorRepository
from ..tutors.service import read_tutor_profile
from .repository import UserRepository

logger = logging.getLogger(__name__)

Transaction = Callable[[], AbstractContextManager]

ADMIN_PROFILE_FIELDS = ("full_name", "nic", "dob", "gender", "email", "contact_no", "address", "join_date")


class AuthService:
    def __init__(self, users: UserRepository, tokens: TokenService, *, transaction: Transaction):
        self._users = users
        self._tokens = tokens
        self._transaction = transaction

    def login(self, data: Mapping[str, Any]) -> Tuple[str, Any]:
        v = FormValidator(data)
        username = v.string("username")
        password = v.string("password", max_length=None)
        v.validate()

        user = self._users.get_by_username(username)
        if not user or not check_password_hash(user.password, password):
            logger.info("Failed login for %r", username)
            raise AuthenticationError("Invalid username or password")
        if not user.is_active:
            raise AuthenticationError("Your account is deactivated")

        token = self._tokens.issue(user_id=user.user_id, role=user.role, username=user.username)
        return token, user

    def logout(self, claims: TokenClaims) -> None:
        with self._transaction():
            self._users.revoke_token(jti=claims.jti, expires_at=_naive_local(claims.expires_at))

    def refresh(self, claims: TokenClaims, user) -> str:
        token = self._tokens.issue(user_id=user.user_id, role=user.role, username=user.username)
        with self._transaction():
            self._users.revoke_token(jti=claims.jti, expires_at=_naive_local(claims.expires_at))
        return token

    def change_password(self, user, data: Mapping[str, Any]) -> None:
        v = FormValidator(data)
        current = v.string("current_password", max_length=None)
        new = v.string("new_password", min_length=PASSWORD_MIN_LENGTH, max_length=None)
        confirm = data.get("new_password_confirmation")
        if new and confirm is not None and confirm != new:
            v.fail("new_password", "The new_password confirmation does not match.")
        v.validate()

        if not check_password_hash(user.password, current):
            raise ValidationError.for_field("current_password", "The current password is incorrect.")

        with self._transaction():
            user.password = generate_password_hash(new)


def _naive_local(value):
    return value.astimezone().replace(tzinfo=None)


class AccountService:
    """Admin-side account management: create/delete users, dashboard numbers, admin profile."""

    def __init__(
        self,
        users: UserRepository,
        students: StudentRepository,
        tutors: TutorRepository,
        classes: ClassRepository,
        subjects: SubjectRepository,
        fees: FeeRepository,
        schedules: ScheduleRepository,
        *,
        uploads: UploadStore,
        sms: SmsSender,
        transaction: Transaction,
        center_name: str = "Tuition Center",
    ):
        self._users = users
        self._students = students
        self._tutors = tutors
        self._classes = classes
        self._subjects = subjects
        self._fees = fees
        self._schedules = schedules
        self._uploads = uploads
        self._sms = sms
        self._transaction = transaction
        self._center_name = center_name

    def create_user(self, data: Mapping[str, Any], *, actor, photo: Optional[FileStorage] = None):
        """Create a student or tutor login together with its profile.

        User, profile, enrollments and the student's first monthly fee are
        written in one transaction. The welcome SMS goes out after commit.
        """
        v = FormValidator(data)
        role = v.choice("role", [Role.STUDENT.value, Role.TUTOR.value])
        username = v.string("username", max_length=100)
        password = v.string("password", min_length=PASSWORD_MIN_LENGTH, max_length=None)
        if username and self._users.username_taken(username):
            v.fail("username", "The username has already been taken.")

        school_class = None
        subject_ids = None
        if role == Role.STUDENT.value:
            profile = read_student_profile(v, partial=False)
            class_id = v.integer("class_id")
            if class_id is not None:
                school_class = self._classes.get(class_id)
                if school_class is None:
                    v.fail("class_id", "The selected class_id is invalid.")
            subject_ids = v.id_list("subject_ids")
        elif role == Role.TUTOR.value:
            profile = read_tutor_profile(v, partial=False)
        else:
            profile = {}
        v.validate()

        subjects = require_subjects(self._subjects, subject_ids) if subject_ids else []
        photo_path = self._uploads.save_photo(photo) if photo and photo.filename else None
        day = today()

        try:
            with self._transaction():
                user = self._users.add(username=username, password=generate_password_hash(password), role=role)
                if role == Role.STUDENT.value:
                    enrollment_date = profile.pop("enrollment_date", None) or day
                    student = self._students.add(
                        user_id=user.user_id,
                        class_id=school_class.class_id,
                        grade=school_class.class_name,
                        enrollment_date=enrollment_date,
                        profile_photo=photo_path,
                        **profile,
                    )
                    student.subjects = list(subjects)
                    student.recompute_monthly_fee()
                    billing_month = month_key(day)
                    first_day, _ = parse_month(billing_month)
                    self._fees.add(
                        student_id=student.student_id,
                        amount=student.total_monthly_fee,
                        billing_month=billing_month,
                        due_date=first_day,
                        status=FeeStatus.PENDING.value,
                        remarks=f"Initial fee for {month_label(billing_month)}",
                        recorded_by=actor.user_id,
                    )
                else:
                    profile["join_date"] = profile.get("join_date") or day
                    self._tutors.add(user_id=user.user_id, profile_photo=photo_path, **profile)
        except Exception:
            self._uploads.delete(photo_path)
            raise

        logger.info("Created %s account %s", role, username)
        self._send_welcome(user)
        return user

    def _send_welcome(self, user) -> None:
        profile = user.profile
        name = getattr(profile, "full_name", user.username)
        message = (
            f"Welcome to {self._center_name}, {name}! "
            f"Your {user.role} account is ready. Username: {user.username}"
        )
        phones = [getattr(profile, "contact_no", None)]
        if user.role == Role.STUDENT.value:
            phones.append(profile.guardian_contact)
        for result in self._sms.send_bulk(list(dict.fromkeys(p for p in phones if p)), message):
            if not result.success:
                logger.warning("Welcome SMS for user %s not delivered: %s", user.user_id, result.message)

    def delete_user(self, user_id: int, *, actor) -> None:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if user.role == Role.ADMIN.value:
            raise AuthorizationError("Admin accounts cannot be deleted")

        profile = user.profile
        files = [getattr(profile, "profile_photo", None)]
        if user.tutor is not None:
            files.extend(m.file_path for m in user.tutor.materials)

        with self._transaction():
            self._users.delete(user)

        for path in files:
            self._uploads.delete(path)
        logger.info("User %s deleted by %s", user_id, actor.user_id)

    def dashboard_stats(self) -> dict:
        return {
            "total_students": self._students.count(),
            "total_tutors": self._tutors.count(),
            "pending_fees": float(self._fees.pending_total()),
            "classes_today": self._schedules.count_on(today()),
        }

    def admin_profile(self, actor):
        if actor.role != Role.ADMIN.value:
            raise AuthorizationError("Unauthorized access")
        return actor.admin_profile

    def update_admin_profile(self, actor, data: Mapping[str, Any], *, photo: Optional[FileStorage] = None):
        if actor.role != Role.ADMIN.value:
            raise AuthorizationError("Unauthorized access")

        v = FormValidator(data)
        fields = {}
        for name in ADMIN_PROFILE_FIELDS:
            if not v.has(name):
                continue
            if name == "email":
                fields[name] = v.email(name)
            elif name in ("dob", "join_date"):
                value = v.date(name, required=False)
                fields[name] = value.isoformat() if value else None
            else:
                fields[name] = v.string(name, required=False, max_length=500)
        v.validate()

        new_photo = self._uploads.save_photo(photo) if photo and photo.filename else None
        profile = actor.admin_profile
        old_photo = profile.profile_photo if profile is not None else None

        try:
            with self._transaction():
                if profile is None:
                    profile = self._users.add_admin_profile(user_id=actor.user_id)
                for key, value in fields.items():
                    setattr(profile, key, value)
                if new_photo:
                    profile.profile_photo = new_photo
        except Exception:
            self._uploads.delete(new_photo)
            raise

        if new_photo and old_photo:
            self._uploads.delete(old_photo)
        return profile
