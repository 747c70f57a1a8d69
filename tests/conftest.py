from __future__ import annotations

import os
from datetime import date, time
from decimal import Decimal
from typing import List, Optional, Tuple

import pytest
from werkzeug.security import generate_password_hash

os.environ["APP_ENV"] = "testing"

from tuition_center.classes.model import SchoolClass, Subject
from tuition_center.core.enums import Role, ScheduleStatus
from tuition_center.database.bootstrap import init_schema
from tuition_center.extensions import db
from tuition_center.main import create_app
from tuition_center.notifications.sms import SmsResult
from tuition_center.schedules.model import ClassSchedule
from tuition_center.students.model import Student
from tuition_center.tutors.model import Tutor
from tuition_center.users.model import User

PASSWORD = "secret123"


class RecordingSms:
    """SMS double that remembers every message instead of calling a provider."""

    def __init__(self):
        self.sent: List[Tuple[str, str]] = []
        self.fail = False
        self.bulk_calls = 0

    def send(self, phone: str, message: str) -> SmsResult:
        self.sent.append((phone, message))
        if self.fail:
            return SmsResult(False, "Provider rejected the message", "fake")
        return SmsResult(True, "SMS sent", "fake", f"msg-{len(self.sent)}")

    def send_bulk(self, phones, message):
        self.bulk_calls += 1
        return [self.send(p, message) for p in phones]

    def numbers(self) -> List[str]:
        return [phone for phone, _ in self.sent]


class Factory:
    """Builds rows straight through the ORM for HTTP tests."""

    def __init__(self, app):
        self._app = app

    def _user(self, username: str, role: Role, *, active: bool = True) -> User:
        user = User(username=username, password=generate_password_hash(PASSWORD), role=role.value, is_active=active)
        db.session.add(user)
        db.session.flush()
        return user

    def admin(self, username: str = "admin") -> User:
        user = self._user(username, Role.ADMIN)
        db.session.commit()
        return user

    def tutor(self, username: str = "tutor1", *, full_name: str = "Nimal Perera", contact_no: str = "0771234567",
              basic_salary: str = "50000.00", active: bool = True) -> Tutor:
        user = self._user(username, Role.TUTOR, active=active)
        tutor = Tutor(
            user_id=user.user_id,
            full_name=full_name,
            contact_no=contact_no,
            nic="901234567V",
            basic_salary=Decimal(basic_salary),
            join_date=date(2024, 1, 1),
        )
        db.session.add(tutor)
        db.session.commit()
        return tutor

    def school_class(self, name: str = "Grade 10") -> SchoolClass:
        school_class = SchoolClass(class_name=name, academic_level="O/L")
        db.session.add(school_class)
        db.session.commit()
        return school_class

    def subject(self, school_class: SchoolClass, name: str = "Mathematics", *, fee: str = "1500.00",
                tutor: Optional[Tutor] = None) -> Subject:
        subject = Subject(
            subject_name=name,
            grade=school_class.class_name,
            class_id=school_class.class_id,
            tutor_id=tutor.tutor_id if tutor else None,
            monthly_fee=Decimal(fee),
        )
        db.session.add(subject)
        db.session.commit()
        return subject

    def student(self, username: str, school_class: SchoolClass, subjects=(), *, full_name: str = "Kamal Silva",
                guardian_contact: str = "0719876543", contact_no: str = "0711111111",
                address: str = "12 Temple Road, Kandy") -> Student:
        user = self._user(username, Role.STUDENT)
        student = Student(
            user_id=user.user_id,
            class_id=school_class.class_id,
            full_name=full_name,
            grade=school_class.class_name,
            contact_no=contact_no,
            gender="male",
            address=address,
            guardian_name="Sunil Silva",
            guardian_contact=guardian_contact,
            emergency_contact="0700000000",
            enrollment_date=date(2025, 1, 1),
        )
        student.subjects = list(subjects)
        student.recompute_monthly_fee()
        db.session.add(student)
        db.session.commit()
        return student

    def schedule(self, subject: Subject, *, tutor: Optional[Tutor] = None, on: date = date(2025, 3, 10),
                 start: time = time(9, 0), end: time = time(10, 0),
                 status: ScheduleStatus = ScheduleStatus.UPCOMING) -> ClassSchedule:
        schedule = ClassSchedule(
            class_id=subject.class_id,
            subject_id=subject.subject_id,
            tutor_id=tutor.tutor_id if tutor else subject.tutor_id,
            schedule_date=on,
            start_time=start,
            end_time=end,
            status=status.value,
        )
        db.session.add(schedule)
        db.session.commit()
        return schedule

    def headers(self, user: User) -> dict:
        container = self._app.extensions["container"]
        token = container.tokens.issue(user_id=user.user_id, role=user.role, username=user.username)
        return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def sms():
    return RecordingSms()


@pytest.fixture()
def app(tmp_path, sms):
    app = create_app(
        overrides={"UPLOAD_FOLDER": str(tmp_path / "storage"), "AUTO_INIT_DB": False, "AUTO_SEED_DB": False},
        sms_gateway=sms,
    )
    with app.app_context():
        init_schema()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make(app):
    return Factory(app)
