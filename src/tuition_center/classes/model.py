from __future__ import annotations

from ..common.http import money
from ..core.enums import ClassStatus
from ..extensions import db
from ..students.model import student_subjects


class SchoolClass(db.Model):
    __tablename__ = "classes"

    class_id = db.Column(db.Integer, primary_key=True)
    class_name = db.Column(db.String(100), unique=True, nullable=False)
    academic_level = db.Column(db.String(100))
    status = db.Column(db.String(20), nullable=False, default=ClassStatus.ACTIVE.value)

    students = db.relationship("Student", back_populates="school_class")
    subjects = db.relationship(
        "Subject", back_populates="school_class", cascade="all, delete-orphan", order_by="Subject.subject_id"
    )
    schedules = db.relationship("ClassSchedule", back_populates="school_class", cascade="all, delete-orphan")

    @property
    def total_students(self) -> int:
        return len(self.students)

    def to_dict(self, *, with_subjects: bool = True) -> dict:
        data = {
            "class_id": self.class_id,
            "class_name": self.class_name,
            "academic_level": self.academic_level,
            "status": self.status,
            "total_students": self.total_students,
        }
        if with_subjects:
            data["subjects"] = [s.to_dict() for s in self.subjects]
        return data


class Subject(db.Model):
    __tablename__ = "subjects"

    subject_id = db.Column(db.Integer, primary_key=True)
    subject_name = db.Column(db.String(255), nullable=False)
    grade = db.Column(db.String(100))
    class_id = db.Column(db.Integer, db.ForeignKey("classes.class_id", ondelete="CASCADE"), nullable=False)
    tutor_id = db.Column(db.Integer, db.ForeignKey("tutors.tutor_id", ondelete="SET NULL"), nullable=True)
    monthly_fee = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    study_materials = db.Column(db.Text)

    school_class = db.relationship("SchoolClass", back_populates="subjects")
    tutor = db.relationship("Tutor", back_populates="subjects")
    students = db.relationship("Student", secondary=student_subjects, back_populates="subjects")
    schedules = db.relationship("ClassSchedule", back_populates="subject", cascade="all, delete-orphan")
    materials = db.relationship("StudyMaterial", back_populates="subject", cascade="all, delete-orphan")

    @property
    def total_students(self) -> int:
        return len(self.students)

    def to_dict(self) -> dict:
        return {
            "subject_id": self.subject_id,
            "subject_name": self.subject_name,
            "grade": self.grade,
            "class_id": self.class_id,
            "class_name": self.school_class.class_name if self.school_class else None,
            "tutor_id": self.tutor_id,
            "tutor_name": self.tutor.full_name if self.tutor else None,
            "monthly_fee": money(self.monthly_fee),
            "study_materials": self.study_materials,
            "total_students": self.total_students,
        }
