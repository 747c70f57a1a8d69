from __future__ import annotations

from contextlib import nullcontext
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from tuition_center.core.exceptions import ConflictError, ValidationError
from tuition_center.fees.service import FeeService
from tuition_center.notifications.sms import SmsResult


class FakeFees:
    def __init__(self):
        self.rows = []

    def get(self, fee_id):
        return next((f for f in self.rows if f.fee_id == fee_id), None)

    def add(self, **fields):
        student = fields.pop("student", None)
        fee = SimpleNamespace(fee_id=len(self.rows) + 1, student=student, paid_date=None, **fields)
        self.rows.append(fee)
        return fee

    def exists_for(self, *, student_id, billing_month, exclude_id=None):
        return any(
            f.student_id == student_id and f.billing_month == billing_month and f.fee_id != exclude_id
            for f in self.rows
        )

    def student_ids_billed(self, billing_month):
        return {f.student_id for f in self.rows if f.billing_month == billing_month}


class FakeStudents:
    def __init__(self, *students):
        self._rows = {s.student_id: s for s in students}

    def get(self, student_id):
        return self._rows.get(student_id)

    def list_billable(self, *, enrolled_by):
        return [
            s
            for s in self._rows.values()
            if s.total_monthly_fee > 0 and (s.enrollment_date is None or s.enrollment_date <= enrolled_by)
        ]


class LinkingFees(FakeFees):
    """Attach the student object the way the ORM relationship would."""

    def __init__(self, students):
        super().__init__()
        self._students = students

    def add(self, **fields):
        return super().add(student=self._students.get(fields["student_id"]), **fields)


class FakeSms:
    def __init__(self):
        self.sent = []

    def send(self, phone, message):
        self.sent.append((phone, message))
        return SmsResult(True, "SMS sent", "fake")

    def send_bulk(self, phones, message):
        return [self.send(p, message) for p in phones]


ADMIN = SimpleNamespace(user_id=1, role="admin")


def student(student_id, fee, *, enrolled=date(2025, 1, 15), guardian="0710000000"):
    return SimpleNamespace(
        student_id=student_id,
        full_name=f"Student {student_id}",
        total_monthly_fee=Decimal(fee),
        enrollment_date=enrolled,
        guardian_contact=guardian,
    )


def make_service(*students):
    repo = FakeStudents(*students)
    fees = LinkingFees(repo)
    sms = FakeSms()
    service = FeeService(fees, repo, subjects=None, sms=sms, transaction=nullcontext, center_name="Bright Minds")
    return service, fees, sms


def test_generation_skips_students_already_billed():
    service, fees, sms = make_service(student(1, "2500.00"), student(2, "1500.00"))

    first = service.generate_monthly({"month": "2025-03"}, actor=ADMIN)
    second = service.generate_monthly({"month": "2025-03"}, actor=ADMIN)

    assert (first["generated"], first["skipped"]) == (2, 0)
    assert (second["generated"], second["skipped"]) == (0, 2)
    assert len(fees.rows) == 2
    assert len(sms.sent) == 2


def test_generation_uses_month_start_and_current_fee():
    service, fees, _ = make_service(student(1, "2500.00"))

    result = service.generate_monthly({"month": "2025-03"}, actor=ADMIN)

    fee = fees.rows[0]
    assert result["message"] == "Generated 1 fee records for March 2025"
    assert fee.amount == Decimal("2500.00")
    assert fee.due_date == date(2025, 3, 1)
    assert fee.status == "pending"
    assert fee.recorded_by == ADMIN.user_id


def test_students_without_fee_or_enrolled_later_are_not_billed():
    service, fees, _ = make_service(
        student(1, "0"),
        student(2, "1000.00", enrolled=date(2025, 4, 2)),
        student(3, "1000.00", enrolled=date(2025, 3, 31)),
    )

    service.generate_monthly({"month": "2025-03"}, actor=ADMIN)

    assert [f.student_id for f in fees.rows] == [3]


def test_reminder_text_names_student_month_and_center():
    service, _, sms = make_service(student(1, "2500.00", guardian="0719876543"))

    service.generate_monthly({"month": "2025-03"}, actor=ADMIN)

    phone, text = sms.sent[0]
    assert phone == "0719876543"
    assert "Student 1" in text
    assert "March 2025" in text
    assert "2500.00" in text
    assert text.endswith("Bright Minds")


def test_student_without_guardian_is_billed_without_sms():
    service, fees, sms = make_service(student(1, "2500.00", guardian=None))

    service.generate_monthly({"month": "2025-03"}, actor=ADMIN)

    assert len(fees.rows) == 1
    assert sms.sent == []


def test_bad_month_is_rejected():
    service, _, _ = make_service()

    with pytest.raises(ValidationError) as err:
        service.generate_monthly({"month": "2025-13"}, actor=ADMIN)

    assert "month" in err.value.errors


def test_manual_fee_duplicate_month_conflicts():
    service, _, _ = make_service(student(1, "2500.00"))
    body = {"student_id": 1, "amount": "2500", "due_date": "2025-03-05"}

    fee = service.create(body, actor=ADMIN)
    assert fee.billing_month == "2025-03"

    with pytest.raises(ConflictError):
        service.create(body, actor=ADMIN)
