from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from decimal import Decimal
from typing import Any, Callable, Dict, Mapping, Optional

from ..common.access import actor_tutor_id
from ..common.datetime_utils import month_label, today
from ..common.validators import FormValidator
from ..core.constants import TUTOR_SALARIES_PER_PAGE
from ..core.enums import SalaryStatus
from ..core.exceptions import ConflictError, NotFoundError
from ..tutors.repository import TutorRepository
from .calculator.base import SalaryCalculator
from .calculator.standard_calculator import StandardSalaryCalculator
from .repository import SalaryRepository

logger = logging.getLogger(__name__)

Transaction = Callable[[], AbstractContextManager]

STATUSES = [s.value for s in SalaryStatus]
AMOUNT_FIELDS = ("base_amount", "allowances", "bonus", "deductions")


class SalaryService:
    def __init__(
        self,
        salaries: SalaryRepository,
        tutors: TutorRepository,
        *,
        transaction: Transaction,
        calculator: Optional[SalaryCalculator] = None,
    ):
        self._salaries = salaries
        self._tutors = tutors
        self._transaction = transaction
        self._calculator = calculator or StandardSalaryCalculator()

    def get(self, salary_id: int):
        salary = self._salaries.get(salary_id)
        if salary is None:
            raise NotFoundError("Salary record not found")
        return salary

    def list_salaries(self, *, month: Optional[str] = None, status: Optional[str] = None, tutor_id: Optional[int] = None):
        return self._salaries.list_filtered(month=month, status=status, tutor_id=tutor_id)

    def _net(self, amounts: Mapping[str, Optional[Decimal]]) -> Decimal:
        return self._calculator.net_salary(**{k: amounts.get(k) or Decimal(0) for k in AMOUNT_FIELDS})

    def _read(self, v: FormValidator, *, partial: bool) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        if v.has("tutor_id") or not partial:
            tutor_id = v.integer("tutor_id")
            if tutor_id is not None and self._tutors.get(tutor_id) is None:
                v.fail("tutor_id", "The selected tutor_id is invalid.")
            fields["tutor_id"] = tutor_id
        if v.has("month") or not partial:
            fields["month"] = v.month("month")
        if v.has("base_amount") or not partial:
            fields["base_amount"] = v.number("base_amount")
        for name in ("allowances", "bonus", "deductions"):
            if v.has(name):
                fields[name] = v.number(name, required=False) or Decimal(0)
        if v.has("status"):
            fields["status"] = v.choice("status", STATUSES)
        if v.has("payment_date"):
            fields["payment_date"] = v.date("payment_date", required=False)
        if v.has("remarks"):
            fields["remarks"] = v.string("remarks", required=False, max_length=None)
        return fields

    def create(self, data: Mapping[str, Any], *, actor):
        v = FormValidator(data)
        fields = self._read(v, partial=False)
        v.validate()

        if self._salaries.exists_for(tutor_id=fields["tutor_id"], month=fields["month"]):
            raise ConflictError(f"A salary for this tutor already exists for {fields['month']}")
        for name in AMOUNT_FIELDS:
            fields.setdefault(name, Decimal(0))
        fields["net_salary"] = self._net(fields)
        fields.setdefault("status", SalaryStatus.PENDING.value)
        if fields["status"] == SalaryStatus.PAID.value and not fields.get("payment_date"):
            fields["payment_date"] = today()

        with self._transaction():
            salary = self._salaries.add(recorded_by=actor.user_id, **fields)
        return salary

    def update(self, salary_id: int, data: Mapping[str, Any]):
        salary = self.get(salary_id)
        v = FormValidator(data)
        fields = self._read(v, partial=True)
        v.validate()

        tutor_id = fields.get("tutor_id") or salary.tutor_id
        month = fields.get("month") or salary.month
        if (tutor_id, month) != (salary.tutor_id, salary.month) and self._salaries.exists_for(
            tutor_id=tutor_id, month=month, exclude_id=salary.salary_id
        ):
            raise ConflictError(f"A salary for this tutor already exists for {month}")

        amounts = {name: fields.get(name, getattr(salary, name)) for name in AMOUNT_FIELDS}
        fields["net_salary"] = self._net(amounts)
        if fields.get("status") == SalaryStatus.PAID.value and not (fields.get("payment_date") or salary.payment_date):
            fields["payment_date"] = today()

        with self._transaction():
            for key, value in fields.items():
                setattr(salary, key, value)
        return salary

    def delete(self, salary_id: int) -> None:
        salary = self.get(salary_id)
        with self._transaction():
            self._salaries.delete(salary)

    def generate_monthly(self, data: Mapping[str, Any], *, actor) -> dict:
        """Create a Pending salary from basic_salary for every active tutor.

        Tutors already holding a row for the month are skipped.
        """
        v = FormValidator(data)
        month = v.month("month")
        v.validate()

        billed = self._salaries.tutor_ids_billed(month)
        tutors = self._tutors.list_active()

        generated = 0
        with self._transaction():
            for tutor in tutors:
                if tutor.tutor_id in billed:
                    continue
                base = Decimal(tutor.basic_salary or 0)
                self._salaries.add(
                    tutor_id=tutor.tutor_id,
                    month=month,
                    base_amount=base,
                    allowances=Decimal(0),
                    bonus=Decimal(0),
                    deductions=Decimal(0),
                    net_salary=self._net({"base_amount": base}),
                    status=SalaryStatus.PENDING.value,
                    recorded_by=actor.user_id,
                )
                generated += 1

        skipped = len(tutors) - generated
        logger.info("Generated %d salaries for %s (%d skipped)", generated, month, skipped)
        return {
            "month": month,
            "generated": generated,
            "skipped": skipped,
            "message": f"Generated {generated} salary records for {month_label(month)}",
        }

    def mark_paid(self, salary_id: int, *, actor):
        salary = self.get(salary_id)
        with self._transaction():
            salary.status = SalaryStatus.PAID.value
            salary.payment_date = today()
            salary.recorded_by = actor.user_id
        return salary

    def tutor_salaries(self, *, actor, page: int = 1) -> dict:
        tutor_id = actor_tutor_id(actor)
        if tutor_id is None:
            raise NotFoundError("Tutor profile not found")
        pagination = self._salaries.paginate_for_tutor(tutor_id, page=page, per_page=TUTOR_SALARIES_PER_PAGE)
        totals = self._salaries.totals_for_tutor(tutor_id)
        return {"pagination": pagination, "summary": {k: float(v) for k, v in totals.items()}}
