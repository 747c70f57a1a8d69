from __future__ import annotations

from datetime import datetime

from ..common.datetime_utils import iso
from ..common.http import money
from ..core.enums import FeeStatus
from ..extensions import db


class Fee(db.Model):
    __tablename__ = "fees"
    __table_args__ = (db.UniqueConstraint("student_id", "billing_month", name="uq_fees_student_month"),)

    fee_id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("students.student_id", ondelete="CASCADE"), nullable=False)
    subject_id = db.Column(db.Integer, db.ForeignKey("subjects.subject_id", ondelete="SET NULL"), nullable=True)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    billing_month = db.Column(db.String(7), nullable=False)
    due_date = db.Column(db.Date, nullable=False)
    paid_date = db.Column(db.Date)
    status = db.Column(db.String(20), nullable=False, default=FeeStatus.PENDING.value)
    remarks = db.Column(db.Text)
    recorded_by = db.Column(db.Integer, db.ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    student = db.relationship("Student", back_populates="fees")
    subject = db.relationship("Subject")

    def to_dict(self) -> dict:
        student = self.student
        return {
            "fee_id": self.fee_id,
            "student_id": self.student_id,
            "student_name": student.full_name if student else None,
            "class_name": student.school_class.class_name if student and student.school_class else None,
            "subject_id": self.subject_id,
            "subject_name": self.subject.subject_name if self.subject else None,
            "amount": money(self.amount),
            "billing_month": self.billing_month,
            "due_date": iso(self.due_date),
            "paid_date": iso(self.paid_date),
            "status": self.status,
            "remarks": self.remarks,
            "recorded_by": self.recorded_by,
        }
