from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for route gating."""

    ADMIN = "admin"
    TUTOR = "tutor"
    STUDENT = "student"


class ScheduleStatus(str, Enum):
    UPCOMING = "Upcoming"
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    POSTPONED = "Postponed"


class AttendanceStatus(str, Enum):
    """Attendance marks; Present and Late both count as attended."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"


class FeeStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class SalaryStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"


class ClassStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Audience(str, Enum):
    ALL = "all"
    STUDENTS = "students"
    TUTORS = "tutors"


class AnnouncementScope(str, Enum):
    ENTIRE_SYSTEM = "entire_system"
    CLASS = "class"
    SUBJECT = "subject"


class NotificationType(str, Enum):
    FEE_REMINDER = "Fee Reminder"
    ATTENDANCE_ALERT = "Attendance Alert"
    SCHEDULE_UPDATE = "Schedule Update"
    ANNOUNCEMENT = "Announcement"
    STUDY_MATERIAL = "Study Material"
    GENERAL = "General"


class NotificationStatus(str, Enum):
    PENDING = "Pending"
    SENT = "Sent"
    FAILED = "Failed"
