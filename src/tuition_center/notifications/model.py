from __future__ import annotations

from datetime import datetime

from ..common.datetime_utils import iso
from ..core.enums import AnnouncementScope, Audience, NotificationStatus, NotificationType
from ..extensions import db


class Notification(db.Model):
    __tablename__ = "notifications"

    notification_id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255))
    type = db.Column(db.String(50), nullable=False, default=NotificationType.GENERAL.value)
    message = db.Column(db.Text, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=True)
    student_id = db.Column(db.Integer, db.ForeignKey("students.student_id", ondelete="CASCADE"), nullable=True)
    recipient_phone = db.Column(db.String(30))
    status = db.Column(db.String(20), nullable=False, default=NotificationStatus.PENDING.value)
    sent_date = db.Column(db.DateTime)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now, index=True)

    user = db.relationship("User", back_populates="notifications", foreign_keys=[user_id])
    student = db.relationship("Student", back_populates="notifications", foreign_keys=[student_id])

    def to_dict(self) -> dict:
        return {
            "notification_id": self.notification_id,
            "title": self.title,
            "type": self.type,
            "message": self.message,
            "user_id": self.user_id,
            "student_id": self.student_id,
            "student_name": self.student.full_name if self.student else None,
            "recipient_phone": self.recipient_phone,
            "status": self.status,
            "sent_date": iso(self.sent_date),
            "is_read": bool(self.is_read),
            "created_at": iso(self.created_at),
        }


class Announcement(db.Model):
    __tablename__ = "announcements"

    announcement_id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    audience = db.Column(db.String(20), nullable=False, default=Audience.ALL.value)
    scope = db.Column(db.String(20), nullable=False, default=AnnouncementScope.ENTIRE_SYSTEM.value)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.class_id", ondelete="CASCADE"), nullable=True)
    subject_id = db.Column(db.Integer, db.ForeignKey("subjects.subject_id", ondelete="CASCADE"), nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now, index=True)

    creator = db.relationship("User", back_populates="announcements")
    school_class = db.relationship("SchoolClass")
    subject = db.relationship("Subject")

    def to_dict(self) -> dict:
        return {
            "announcement_id": self.announcement_id,
            "title": self.title,
            "message": self.message,
            "audience": self.audience,
            "scope": self.scope,
            "class_id": self.class_id,
            "class_name": self.school_class.class_name if self.school_class else None,
            "subject_id": self.subject_id,
            "subject_name": self.subject.subject_name if self.subject else None,
            "created_by": self.created_by,
            "creator_name": self.creator.display_name if self.creator else None,
            "creator_role": self.creator.role if self.creator else None,
            "created_at": iso(self.created_at),
        }
