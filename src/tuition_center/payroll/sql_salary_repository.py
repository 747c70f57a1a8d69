from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import case, func, select

from ..core.enums import SalaryStatus
from ..database.sql_base import SqlRepository
from ..extensions import db
from .model import Salary


def _dec(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(Decimal("0.01"))


class SqlSalaryRepository(SqlRepository[Salary]):
    model = Salary

    def exists_for(self, *, tutor_id: int, month: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(func.count()).select_from(Salary).where(Salary.tutor_id == int(tutor_id), Salary.month == month)
        if exclude_id is not None:
            stmt = stmt.where(Salary.salary_id != int(exclude_id))
        return bool(self.session.scalar(stmt))

    def tutor_ids_billed(self, month: str) -> set:
        return set(self.session.scalars(select(Salary.tutor_id).where(Salary.month == month)))

    def list_filtered(
        self, *, month: Optional[str] = None, status: Optional[str] = None, tutor_id: Optional[int] = None
    ) -> Sequence[Salary]:
        stmt = select(Salary).order_by(Salary.month.desc(), Salary.salary_id.desc())
        if month:
            stmt = stmt.where(Salary.month == month)
        if status:
            stmt = stmt.where(Salary.status == status)
        if tutor_id is not None:
            stmt = stmt.where(Salary.tutor_id == int(tutor_id))
        return self.scalars(stmt)

    def paginate_for_tutor(self, tutor_id: int, *, page: int = 1, per_page: int = 15):
        stmt = select(Salary).where(Salary.tutor_id == int(tutor_id)).order_by(Salary.month.desc())
        return db.paginate(stmt, page=page, per_page=per_page, error_out=False)

    def totals_for_tutor(self, tutor_id: int) -> dict:
        paid = case((Salary.status == SalaryStatus.PAID.value, Salary.net_salary), else_=0)
        pending = case((Salary.status == SalaryStatus.PENDING.value, Salary.net_salary), else_=0)
        row = self.session.execute(select(func.sum(paid), func.sum(pending)).where(Salary.tutor_id == int(tutor_id))).one()
        return {"total_earned": _dec(row[0]), "pending_amount": _dec(row[1])}
