from __future__ import annotations

from datetime import date

from ..common.datetime_utils import iso
from ..common.http import money
from ..common.uploads import public_url
from ..database.types import EncryptedText
from ..extensions import db

student_subjects = db.Table(
    "student_subjects",
    db.Column("student_id", db.Integer, db.ForeignKey("students.student_id", ondelete="CASCADE"), primary_key=True),
    db.Column("subject_id", db.Integer, db.ForeignKey("subjects.subject_id", ondelete="CASCADE"), primary_key=True),
)


class Student(db.Model):
    __tablename__ = "students"

    student_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, unique=True)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.class_id", ondelete="SET NULL"), nullable=True)
    full_name = db.Column(db.String(255), nullable=False)
    contact_no = db.Column(db.String(20))
    nic = db.Column(db.String(20))
    email = db.Column(db.String(255))
    dob = db.Column(db.Date)
    gender = db.Column(db.String(20))
    grade = db.Column(db.String(100))
    address = db.Column(EncryptedText)
    guardian_name = db.Column(db.String(255))
    guardian_contact = db.Column(EncryptedText)
    emergency_contact = db.Column(EncryptedText)
    enrollment_date = db.Column(db.Date, default=date.today)
    total_monthly_fee = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    profile_photo = db.Column(db.String(255))

    user = db.relationship("User", back_populates="student")
    school_class = db.relationship("SchoolClass", back_populates="students")
    subjects = db.relationship("Subject", secondary=student_subjects, back_populates="students", order_by="Subject.subject_name")
    fees = db.relationship("Fee", back_populates="student", cascade="all, delete-orphan")
    attendance = db.relationship("Attendance", back_populates="student", cascade="all, delete-orphan")
    notifications = db.relationship(
        "Notification", back_populates="student", cascade="all, delete-orphan", foreign_keys="Notification.student_id"
    )

    def to_dict(self, *, with_subjects: bool = False, with_fees: bool = False) -> dict:
        data = {
            "student_id": self.student_id,
            "user_id": self.user_id,
            "username": self.user.username if self.user else None,
            "class_id": self.class_id,
            "class_name": self.school_class.class_name if self.school_class else None,
            "full_name": self.full_name,
            "contact_no": self.contact_no,
            "nic": self.nic,
            "email": self.email,
            "dob": iso(self.dob),
            "gender": self.gender,
            "grade": self.grade,
            "address": self.address,
            "guardian_name": self.guardian_name,
            "guardian_contact": self.guardian_contact,
            "emergency_contact": self.emergency_contact,
            "enrollment_date": iso(self.enrollment_date),
            "total_monthly_fee": money(self.total_monthly_fee),
            "profile_photo": self.profile_photo,
            "profile_photo_url": public_url(self.profile_photo),
        }
        if with_subjects:
            data["subjects"] = [s.to_dict() for s in self.subjects]
        if with_fees:
            data["fees"] = [f.to_dict() for f in sorted(self.fees, key=lambda f: f.due_date or date.min, reverse=True)]
        return data

    def recompute_monthly_fee(self) -> None:
        self.total_monthly_fee = sum((s.monthly_fee or 0 for s in self.subjects), 0)
