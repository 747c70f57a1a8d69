from __future__ import annotations

from ..common.datetime_utils import iso
from ..common.http import money
from ..common.uploads import public_url
from ..database.types import EncryptedText
from ..extensions import db


class Tutor(db.Model):
    __tablename__ = "tutors"

    tutor_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, unique=True)
    full_name = db.Column(db.String(255), nullable=False)
    nic = db.Column(EncryptedText)
    email = db.Column(db.String(255))
    contact_no = db.Column(EncryptedText)
    address = db.Column(EncryptedText)
    emergency_contact = db.Column(EncryptedText)
    basic_salary = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    dob = db.Column(db.Date)
    gender = db.Column(db.String(20))
    join_date = db.Column(db.Date)
    experience = db.Column(db.String(255))
    qualification = db.Column(db.String(255))
    profile_photo = db.Column(db.String(255))

    user = db.relationship("User", back_populates="tutor")
    subjects = db.relationship("Subject", back_populates="tutor", order_by="Subject.subject_name")
    schedules = db.relationship("ClassSchedule", back_populates="tutor")
    salaries = db.relationship("Salary", back_populates="tutor", cascade="all, delete-orphan")
    materials = db.relationship("StudyMaterial", back_populates="uploader", cascade="all, delete-orphan")

    @property
    def is_active(self) -> bool:
        return bool(self.user and self.user.is_active)

    def to_dict(self, *, with_subjects: bool = False, with_salaries: bool = False) -> dict:
        data = {
            "tutor_id": self.tutor_id,
            "user_id": self.user_id,
            "username": self.user.username if self.user else None,
            "status": "active" if self.is_active else "inactive",
            "full_name": self.full_name,
            "nic": self.nic,
            "email": self.email,
            "contact_no": self.contact_no,
            "address": self.address,
            "emergency_contact": self.emergency_contact,
            "basic_salary": money(self.basic_salary),
            "dob": iso(self.dob),
            "gender": self.gender,
            "join_date": iso(self.join_date),
            "experience": self.experience,
            "qualification": self.qualification,
            "profile_photo": self.profile_photo,
            "profile_photo_url": public_url(self.profile_photo),
        }
        if with_subjects:
            data["subjects"] = [s.to_dict() for s in self.subjects]
        if with_salaries:
            data["salaries"] = [s.to_dict() for s in sorted(self.salaries, key=lambda s: s.month, reverse=True)]
        return data
