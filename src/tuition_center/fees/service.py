from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from typing import Any, Callable, Dict, Mapping, Optional

from ..classes.repository import SubjectRepository
from ..common.access import actor_student
from ..common.datetime_utils import month_key, month_label, parse_month, today
from ..common.validators import FormValidator
from ..core.constants import CURRENCY, STUDENT_FEES_PER_PAGE
from ..core.enums import FeeStatus
from ..core.exceptions import BadRequestError, ConflictError, ExternalServiceError, NotFoundError
from ..notifications.sms import SmsSender
from ..students.repository import StudentRepository
from .repository import FeeRepository

logger = logging.getLogger(__name__)

Transaction = Callable[[], AbstractContextManager]

STATUSES = [s.value for s in FeeStatus]


class FeeService:
    def __init__(
        self,
        fees: FeeRepository,
        students: StudentRepository,
        subjects: SubjectRepository,
        *,
        sms: SmsSender,
        transaction: Transaction,
        center_name: str = "Tuition Center",
    ):
        self._fees = fees
        self._students = students
        self._subjects = subjects
        self._sms = sms
        self._transaction = transaction
        self._center_name = center_name

    def get(self, fee_id: int):
        fee = self._fees.get(fee_id)
        if fee is None:
            raise NotFoundError("Fee record not found")
        return fee

    def list_fees(
        self,
        *,
        status: Optional[str] = None,
        month: Optional[str] = None,
        class_id: Optional[int] = None,
        student_id: Optional[int] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
    ):
        return self._fees.list_filtered(
            status=status,
            month=month,
            class_id=class_id,
            student_id=student_id,
            search=search,
            newest_first=(sort or "desc").lower() != "asc",
        )

    def _read(self, v: FormValidator, *, partial: bool) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        if v.has("student_id") or not partial:
            student_id = v.integer("student_id")
            if student_id is not None and self._students.get(student_id) is None:
                v.fail("student_id", "The selected student_id is invalid.")
            fields["student_id"] = student_id
        if v.has("subject_id"):
            subject_id = v.integer("subject_id", required=False)
            if subject_id is not None and self._subjects.get(subject_id) is None:
                v.fail("subject_id", "The selected subject_id is invalid.")
            fields["subject_id"] = subject_id
        if v.has("amount") or not partial:
            fields["amount"] = v.number("amount")
        if v.has("due_date") or not partial:
            fields["due_date"] = v.date("due_date")
        if v.has("billing_month"):
            fields["billing_month"] = v.month("billing_month")
        if v.has("status"):
            fields["status"] = v.choice("status", STATUSES)
        if v.has("paid_date"):
            fields["paid_date"] = v.date("paid_date", required=False)
        if v.has("remarks"):
            fields["remarks"] = v.string("remarks", required=False, max_length=None)
        return fields

    def create(self, data: Mapping[str, Any], *, actor):
        v = FormValidator(data)
        fields = self._read(v, partial=False)
        v.validate()

        fields["billing_month"] = fields.get("billing_month") or month_key(fields["due_date"])
        fields.setdefault("status", FeeStatus.PENDING.value)
        if fields["status"] == FeeStatus.PAID.value and not fields.get("paid_date"):
            fields["paid_date"] = today()
        if self._fees.exists_for(student_id=fields["student_id"], billing_month=fields["billing_month"]):
            raise ConflictError(f"A fee for this student already exists for {fields['billing_month']}")

        with self._transaction():
            fee = self._fees.add(recorded_by=actor.user_id, **fields)
        return fee

    def update(self, fee_id: int, data: Mapping[str, Any]):
        fee = self.get(fee_id)
        v = FormValidator(data)
        fields = self._read(v, partial=True)
        v.validate()

        student_id = fields.get("student_id") or fee.student_id
        billing_month = fields.get("billing_month") or fee.billing_month
        if (student_id, billing_month) != (fee.student_id, fee.billing_month) and self._fees.exists_for(
            student_id=student_id, billing_month=billing_month, exclude_id=fee.fee_id
        ):
            raise ConflictError(f"A fee for this student already exists for {billing_month}")
        if fields.get("status") == FeeStatus.PAID.value and not (fields.get("paid_date") or fee.paid_date):
            fields["paid_date"] = today()
        if fields.get("status") == FeeStatus.PENDING.value:
            fields.setdefault("paid_date", None)

        with self._transaction():
            for key, value in fields.items():
                setattr(fee, key, value)
        return fee

    def delete(self, fee_id: int) -> None:
        fee = self.get(fee_id)
        with self._transaction():
            self._fees.delete(fee)

    def generate_monthly(self, data: Mapping[str, Any], *, actor) -> dict:
        """Create one pending fee per billable student for ``month``.

        Students already billed for the month are skipped, so running this
        twice produces no duplicates. The unique (student, month) constraint
        catches a concurrent run and the whole batch is rolled back as 409.
        """
        v = FormValidator(data)
        month = v.month("month")
        v.validate()

        first_day, last_day = parse_month(month)
        label = month_label(month)
        already_billed = self._fees.student_ids_billed(month)
        candidates = self._students.list_billable(enrolled_by=last_day)

        created = []
        with self._transaction():
            for student in candidates:
                if student.student_id in already_billed:
                    continue
                created.append(
                    self._fees.add(
                        student_id=student.student_id,
                        amount=student.total_monthly_fee,
                        billing_month=month,
                        due_date=first_day,
                        status=FeeStatus.PENDING.value,
                        remarks=f"Monthly fee for {label}",
                        recorded_by=actor.user_id,
                    )
                )

        skipped = len(candidates) - len(created)
        logger.info("Generated %d fee records for %s (%d skipped)", len(created), month, skipped)

        for fee in created:
            self._send_reminder(fee)

        return {
            "month": month,
            "generated": len(created),
            "skipped": skipped,
            "message": f"Generated {len(created)} fee records for {label}",
        }

    def mark_paid(self, fee_id: int, *, actor):
        fee = self.get(fee_id)
        with self._transaction():
            fee.status = FeeStatus.PAID.value
            fee.paid_date = today()
            fee.recorded_by = actor.user_id
        return fee

    def remind(self, fee_id: int) -> dict:
        fee = self.get(fee_id)
        if fee.status == FeeStatus.PAID.value:
            raise BadRequestError("This fee is already paid")
        if not fee.student.guardian_contact:
            raise BadRequestError("No guardian contact number on record")

        result = self._send_reminder(fee)
        if not result.success:
            raise ExternalServiceError(f"Failed to send reminder: {result.message}")
        return result.to_dict()

    def _reminder_text(self, fee) -> str:
        return (
            f"Dear Parent, the fee of {CURRENCY} {float(fee.amount):.2f} for {fee.student.full_name} "
            f"({month_label(fee.billing_month)}) is due on {fee.due_date.isoformat()}. - {self._center_name}"
        )

    def _send_reminder(self, fee):
        phone = fee.student.guardian_contact
        if not phone:
            logger.info("No guardian contact for student %s, reminder skipped", fee.student_id)
            return None
        result = self._sms.send(phone, self._reminder_text(fee))
        if not result.success:
            logger.warning("Fee reminder for fee %s not delivered: %s", fee.fee_id, result.message)
        return result

    def student_fees(self, *, actor, page: int = 1) -> dict:
        student = actor_student(actor)
        if student is None:
            raise NotFoundError("Student profile not found")
        pagination = self._fees.paginate_for_student(student.student_id, page=page, per_page=STUDENT_FEES_PER_PAGE)
        totals = self._fees.totals_for_student(student.student_id)
        return {"pagination": pagination, "summary": {k: float(v) for k, v in totals.items()}}
