from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import case, func, select

from ..core.enums import FeeStatus
from ..database.sql_base import SqlRepository
from ..extensions import db
from ..students.model import Student
from .model import Fee


def _dec(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(Decimal("0.01"))


class SqlFeeRepository(SqlRepository[Fee]):
    model = Fee

    def exists_for(self, *, student_id: int, billing_month: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(func.count()).select_from(Fee).where(
            Fee.student_id == int(student_id), Fee.billing_month == billing_month
        )
        if exclude_id is not None:
            stmt = stmt.where(Fee.fee_id != int(exclude_id))
        return bool(self.session.scalar(stmt))

    def student_ids_billed(self, billing_month: str) -> set:
        stmt = select(Fee.student_id).where(Fee.billing_month == billing_month)
        return set(self.session.scalars(stmt))

    def list_filtered(
        self,
        *,
        status: Optional[str] = None,
        month: Optional[str] = None,
        class_id: Optional[int] = None,
        student_id: Optional[int] = None,
        search: Optional[str] = None,
        newest_first: bool = True,
    ) -> Sequence[Fee]:
        stmt = select(Fee).join(Student, Fee.student_id == Student.student_id)
        if status:
            stmt = stmt.where(Fee.status == status)
        if month:
            stmt = stmt.where(Fee.billing_month == month)
        if class_id is not None:
            stmt = stmt.where(Student.class_id == int(class_id))
        if student_id is not None:
            stmt = stmt.where(Fee.student_id == int(student_id))
        if search:
            stmt = stmt.where(Student.full_name.ilike(f"%{search}%"))
        order = Fee.due_date.desc() if newest_first else Fee.due_date.asc()
        return self.scalars(stmt.order_by(order, Fee.fee_id.desc()))

    def paginate_for_student(self, student_id: int, *, page: int = 1, per_page: int = 15):
        stmt = select(Fee).where(Fee.student_id == int(student_id)).order_by(Fee.due_date.desc(), Fee.fee_id.desc())
        return db.paginate(stmt, page=page, per_page=per_page, error_out=False)

    def totals_for_student(self, student_id: int) -> dict:
        paid = case((Fee.status == FeeStatus.PAID.value, Fee.amount), else_=0)
        pending = case((Fee.status == FeeStatus.PENDING.value, Fee.amount), else_=0)
        row = self.session.execute(
            select(func.sum(Fee.amount), func.sum(paid), func.sum(pending)).where(Fee.student_id == int(student_id))
        ).one()
        return {
            "total": _dec(row[0]),
            "paid": _dec(row[1]),
            "pending": _dec(row[2]),
        }

    def pending_total(self) -> Decimal:
        stmt = select(func.sum(Fee.amount)).where(Fee.status == FeeStatus.PENDING.value)
        return _dec(self.session.scalar(stmt))
