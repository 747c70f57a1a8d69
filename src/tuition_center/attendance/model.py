from __future__ import annotations

from datetime import datetime

from ..common.datetime_utils import iso
from ..core.enums import AttendanceStatus
from ..extensions import db


class Attendance(db.Model):
    __tablename__ = "attendance"
    __table_args__ = (db.UniqueConstraint("schedule_id", "student_id", name="uq_attendance_schedule_student"),)

    attendance_id = db.Column(db.Integer, primary_key=True)
    schedule_id = db.Column(db.Integer, db.ForeignKey("class_schedules.schedule_id", ondelete="CASCADE"), nullable=False)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.class_id", ondelete="CASCADE"), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey("students.student_id", ondelete="CASCADE"), nullable=False)
    attendance_date = db.Column(db.Date, nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=AttendanceStatus.PRESENT.value)
    marked_by = db.Column(db.Integer, db.ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    schedule = db.relationship("ClassSchedule", back_populates="attendance")
    student = db.relationship("Student", back_populates="attendance")

    @property
    def attended(self) -> bool:
        return self.status in (AttendanceStatus.PRESENT.value, AttendanceStatus.LATE.value)

    def to_dict(self) -> dict:
        schedule = self.schedule
        return {
            "attendance_id": self.attendance_id,
            "schedule_id": self.schedule_id,
            "class_id": self.class_id,
            "student_id": self.student_id,
            "student_name": self.student.full_name if self.student else None,
            "attendance_date": iso(self.attendance_date),
            "status": self.status,
            "marked_by": self.marked_by,
            "subject_name": schedule.subject.subject_name if schedule and schedule.subject else None,
            "schedule_status": schedule.status if schedule else None,
        }
