from __future__ import annotations

from contextlib import nullcontext
from decimal import Decimal
from types import SimpleNamespace

import pytest

from tuition_center.core.exceptions import ConflictError
from tuition_center.payroll.service import SalaryService


class FakeSalaries:
    def __init__(self):
        self.rows = []

    def get(self, salary_id):
        return next((s for s in self.rows if s.salary_id == salary_id), None)

    def add(self, **fields):
        fields.setdefault("payment_date", None)
        row = SimpleNamespace(salary_id=len(self.rows) + 1, **fields)
        self.rows.append(row)
        return row

    def exists_for(self, *, tutor_id, month, exclude_id=None):
        return any(s.tutor_id == tutor_id and s.month == month and s.salary_id != exclude_id for s in self.rows)

    def tutor_ids_billed(self, month):
        return {s.tutor_id for s in self.rows if s.month == month}


class FakeTutors:
    def __init__(self, *tutors):
        self._rows = {t.tutor_id: t for t in tutors}

    def get(self, tutor_id):
        return self._rows.get(tutor_id)

    def list_active(self):
        return [t for t in self._rows.values() if t.active]


ADMIN = SimpleNamespace(user_id=1, role="admin")


def make_service():
    tutors = FakeTutors(
        SimpleNamespace(tutor_id=1, basic_salary=Decimal("50000.00"), active=True),
        SimpleNamespace(tutor_id=2, basic_salary=Decimal("40000.00"), active=True),
        SimpleNamespace(tutor_id=3, basic_salary=Decimal("30000.00"), active=False),
    )
    salaries = FakeSalaries()
    return SalaryService(salaries, tutors, transaction=nullcontext), salaries


def test_generate_covers_active_tutors_once():
    service, salaries = make_service()

    first = service.generate_monthly({"month": "2025-03"}, actor=ADMIN)
    second = service.generate_monthly({"month": "2025-03"}, actor=ADMIN)

    assert (first["generated"], first["skipped"]) == (2, 0)
    assert (second["generated"], second["skipped"]) == (0, 2)
    assert sorted(s.tutor_id for s in salaries.rows) == [1, 2]
    assert all(s.status == "Pending" for s in salaries.rows)
    assert salaries.rows[0].net_salary == Decimal("50000.00")


def test_create_computes_net_and_blocks_duplicates():
    service, _ = make_service()
    body = {"tutor_id": 1, "month": "2025-04", "base_amount": "50000", "bonus": "5000", "deductions": "1200"}

    salary = service.create(body, actor=ADMIN)
    assert salary.net_salary == Decimal("53800.00")
    assert salary.allowances == Decimal(0)

    with pytest.raises(ConflictError):
        service.create(body, actor=ADMIN)


def test_paid_salary_gets_payment_date():
    service, _ = make_service()

    salary = service.create(
        {"tutor_id": 2, "month": "2025-04", "base_amount": "40000", "status": "Paid"}, actor=ADMIN
    )

    assert salary.payment_date is not None


def test_update_recomputes_net_from_stored_amounts():
    service, _ = make_service()
    salary = service.create({"tutor_id": 1, "month": "2025-04", "base_amount": "50000", "bonus": "1000"}, actor=ADMIN)

    service.update(salary.salary_id, {"deductions": "500"})

    assert salary.net_salary == Decimal("50500.00")
