from __future__ import annotations

from datetime import datetime

from ..common.uploads import public_url
from ..core.enums import Role
from ..database.types import EncryptedText
from ..extensions import db


class User(db.Model):
    __tablename__ = "users"

    user_id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(100), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=Role.STUDENT.value)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    student = db.relationship("Student", back_populates="user", uselist=False, cascade="all, delete-orphan")
    tutor = db.relationship("Tutor", back_populates="user", uselist=False, cascade="all, delete-orphan")
    admin_profile = db.relationship("AdminProfile", back_populates="user", uselist=False, cascade="all, delete-orphan")
    notifications = db.relationship(
        "Notification", back_populates="user", cascade="all, delete-orphan", foreign_keys="Notification.user_id"
    )
    announcements = db.relationship("Announcement", back_populates="creator", cascade="all, delete-orphan")

    @property
    def profile(self):
        if self.role == Role.STUDENT.value:
            return self.student
        if self.role == Role.TUTOR.value:
            return self.tutor
        return self.admin_profile

    @property
    def display_name(self) -> str:
        profile = self.profile
        return getattr(profile, "full_name", None) or self.username

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "username": self.username,
            "role": self.role,
            "is_active": bool(self.is_active),
        }

    def summary(self) -> dict:
        """Shape returned by login and /auth/me."""
        profile = self.profile
        return {
            "user_id": self.user_id,
            "id": self.user_id,
            "username": self.username,
            "role": self.role,
            "name": self.display_name,
            "profile": profile.to_dict() if profile is not None else None,
            "tutor_id": self.tutor.tutor_id if self.tutor else None,
            "student_id": self.student.student_id if self.student else None,
        }


class AdminProfile(db.Model):
    """Admin contact card; every column is encrypted at rest."""

    __tablename__ = "admin_profiles"

    admin_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, unique=True)
    full_name = db.Column(EncryptedText)
    profile_photo = db.Column(EncryptedText)
    nic = db.Column(EncryptedText)
    dob = db.Column(EncryptedText)
    gender = db.Column(EncryptedText)
    email = db.Column(EncryptedText)
    contact_no = db.Column(EncryptedText)
    address = db.Column(EncryptedText)
    join_date = db.Column(EncryptedText)

    user = db.relationship("User", back_populates="admin_profile")

    def to_dict(self) -> dict:
        return {
            "admin_id": self.admin_id,
            "user_id": self.user_id,
            "full_name": self.full_name,
            "profile_photo": self.profile_photo,
            "profile_photo_url": public_url(self.profile_photo),
            "nic": self.nic,
            "dob": self.dob,
            "gender": self.gender,
            "email": self.email,
            "contact_no": self.contact_no,
            "address": self.address,
            "join_date": self.join_date,
        }


class RevokedToken(db.Model):
    __tablename__ = "revoked_tokens"

    id = db.Column(db.Integer, primary_key=True)
    jti = db.Column(db.String(64), unique=True, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    revoked_at = db.Column(db.DateTime, nullable=False, default=datetime.now)
