from __future__ import annotations

from datetime import datetime

from ..common.datetime_utils import iso
from ..common.uploads import public_url
from ..extensions import db


class StudyMaterial(db.Model):
    __tablename__ = "study_materials"

    material_id = db.Column(db.Integer, primary_key=True)
    subject_id = db.Column(db.Integer, db.ForeignKey("subjects.subject_id", ondelete="CASCADE"), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    file_path = db.Column(db.String(500), nullable=False)
    file_name = db.Column(db.String(255))
    file_size = db.Column(db.String(50))
    uploaded_by = db.Column(db.Integer, db.ForeignKey("tutors.tutor_id", ondelete="CASCADE"), nullable=True)
    uploaded_date = db.Column(db.DateTime, nullable=False, default=datetime.now)

    subject = db.relationship("Subject", back_populates="materials")
    uploader = db.relationship("Tutor", back_populates="materials")

    def to_dict(self) -> dict:
        subject = self.subject
        return {
            "material_id": self.material_id,
            "subject_id": self.subject_id,
            "subject_name": subject.subject_name if subject else None,
            "class_id": subject.class_id if subject else None,
            "class_name": subject.school_class.class_name if subject and subject.school_class else None,
            "title": self.title,
            "description": self.description,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "file_url": public_url(self.file_path),
            "uploaded_by": self.uploaded_by,
            "tutor_name": self.uploader.full_name if self.uploader else None,
            "uploaded_date": iso(self.uploaded_date),
        }
