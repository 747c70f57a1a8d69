from __future__ import annotations

from datetime import datetime

from ..common.datetime_utils import format_clock, iso
from ..core.enums import ScheduleStatus
from ..extensions import db


class ClassSchedule(db.Model):
    __tablename__ = "class_schedules"

    schedule_id = db.Column(db.Integer, primary_key=True)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.class_id", ondelete="CASCADE"), nullable=False)
    subject_id = db.Column(db.Integer, db.ForeignKey("subjects.subject_id", ondelete="CASCADE"), nullable=False)
    tutor_id = db.Column(db.Integer, db.ForeignKey("tutors.tutor_id", ondelete="SET NULL"), nullable=True)
    schedule_date = db.Column(db.Date, nullable=False, index=True)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=ScheduleStatus.UPCOMING.value)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    school_class = db.relationship("SchoolClass", back_populates="schedules")
    subject = db.relationship("Subject", back_populates="schedules")
    tutor = db.relationship("Tutor", back_populates="schedules")
    attendance = db.relationship("Attendance", back_populates="schedule", cascade="all, delete-orphan")

    def to_dict(self) -> dict:
        return {
            "schedule_id": self.schedule_id,
            "class_id": self.class_id,
            "class_name": self.school_class.class_name if self.school_class else None,
            "subject_id": self.subject_id,
            "subject_name": self.subject.subject_name if self.subject else None,
            "tutor_id": self.tutor_id,
            "tutor_name": self.tutor.full_name if self.tutor else None,
            "schedule_date": iso(self.schedule_date),
            "start_time": format_clock(self.start_time),
            "end_time": format_clock(self.end_time),
            "status": self.status,
        }
