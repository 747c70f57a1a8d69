from __future__ import annotations

from datetime import datetime

from ..common.datetime_utils import iso
from ..common.http import money
from ..core.enums import SalaryStatus
from ..extensions import db


class Salary(db.Model):
    __tablename__ = "salaries"
    __table_args__ = (db.UniqueConstraint("tutor_id", "month", name="uq_salaries_tutor_month"),)

    salary_id = db.Column(db.Integer, primary_key=True)
    tutor_id = db.Column(db.Integer, db.ForeignKey("tutors.tutor_id", ondelete="CASCADE"), nullable=False)
    month = db.Column(db.String(7), nullable=False)
    base_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    allowances = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    bonus = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    deductions = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    net_salary = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    payment_date = db.Column(db.Date)
    status = db.Column(db.String(20), nullable=False, default=SalaryStatus.PENDING.value)
    remarks = db.Column(db.Text)
    recorded_by = db.Column(db.Integer, db.ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    tutor = db.relationship("Tutor", back_populates="salaries")

    def to_dict(self) -> dict:
        return {
            "salary_id": self.salary_id,
            "tutor_id": self.tutor_id,
            "tutor_name": self.tutor.full_name if self.tutor else None,
            "month": self.month,
            "base_amount": money(self.base_amount),
            "allowances": money(self.allowances),
            "bonus": money(self.bonus),
            "deductions": money(self.deductions),
            "net_salary": money(self.net_salary),
            "payment_date": iso(self.payment_date),
            "status": self.status,
            "remarks": self.remarks,
            "recorded_by": self.recorded_by,
        }
