from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..classes.repository import ClassRepository, SubjectRepository
from ..common.access import actor_student, actor_tutor_id, has_role, is_admin
from ..common.datetime_utils import now_local
from ..common.validators import FormValidator
from ..core.constants import NOTIFICATIONS_PER_PAGE
from ..core.enums import AnnouncementScope, Audience, NotificationStatus, NotificationType, Role
from ..core.exceptions import AuthorizationError, BadRequestError, ExternalServiceError, NotFoundError
from ..students.repository import StudentRepository
from ..tutors.repository import TutorRepository
from .repository import AnnouncementRepository, NotificationRepository
from .sms import SmsSender

logger = logging.getLogger(__name__)

Transaction = Callable[[], AbstractContextManager]

TYPES = [t.value for t in NotificationType]
STATUSES = [s.value for s in NotificationStatus]


@dataclass(frozen=True)
class Recipient:
    user_id: int
    student_id: Optional[int]
    phones: Tuple[str, ...]


class NotificationService:
    def __init__(
        self,
        notifications: NotificationRepository,
        students: StudentRepository,
        *,
        sms: SmsSender,
        transaction: Transaction,
    ):
        self._notifications = notifications
        self._students = students
        self._sms = sms
        self._transaction = transaction

    def get(self, notification_id: int):
        notification = self._notifications.get(notification_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        return notification

    def search(self, *, type=None, status=None, student_id=None, start=None, end=None, page: int = 1):
        return self._notifications.paginate_filtered(
            type=type,
            status=status,
            student_id=student_id,
            start=start,
            end=end,
            page=page,
            per_page=NOTIFICATIONS_PER_PAGE,
        )

    def create(self, data: Mapping[str, Any]):
        v = FormValidator(data)
        title = v.string("title", required=False)
        kind = v.choice("type", TYPES, required=False) or NotificationType.GENERAL.value
        message = v.string("message", max_length=1000)
        student = None
        if v.has("student_id"):
            student_id = v.integer("student_id", required=False)
            if student_id is not None:
                student = self._students.get(student_id)
                if student is None:
                    v.fail("student_id", "The selected student_id is invalid.")
        phone = v.string("recipient_phone", required=False, max_length=30)
        send_now = v.boolean("send_immediately")
        if not phone and student is not None:
            phone = student.guardian_contact or student.contact_no
        if not phone and student is None:
            v.fail("recipient_phone", "The recipient_phone field is required when student_id is not present.")
        v.validate()

        with self._transaction():
            notification = self._notifications.add(
                title=title,
                type=kind,
                message=message,
                student_id=student.student_id if student else None,
                user_id=student.user_id if student else None,
                recipient_phone=phone,
                status=NotificationStatus.PENDING.value,
            )

        if send_now:
            self._deliver(notification)
        return notification

    def _deliver(self, notification) -> bool:
        """SMS one notification and persist Sent/Failed."""
        result = self._sms.send(notification.recipient_phone or "", notification.message)
        with self._transaction():
            if result.success:
                notification.status = NotificationStatus.SENT.value
                notification.sent_date = now_local()
            else:
                notification.status = NotificationStatus.FAILED.value
        return result.success

    def send(self, notification_id: int):
        notification = self.get(notification_id)
        if notification.status == NotificationStatus.SENT.value:
            raise BadRequestError("Notification already sent")
        if not notification.recipient_phone:
            raise BadRequestError("Notification has no recipient phone")
        if not self._deliver(notification):
            raise ExternalServiceError("Failed to send notification")
        return notification

    def _deliver_all(self, notifications: Sequence[Any]) -> Dict[str, int]:
        sent = failed = 0
        for notification in notifications:
            if self._deliver(notification):
                sent += 1
            else:
                failed += 1
        return {"sent": sent, "failed": failed}

    def send_pending(self) -> Dict[str, int]:
        counts = self._deliver_all(self._notifications.list_pending())
        logger.info("Pending notifications processed: %s", counts)
        return counts

    def bulk_send(self, data: Mapping[str, Any]) -> Dict[str, int]:
        v = FormValidator(data)
        ids = v.id_list("notification_ids")
        v.validate()
        found = self._notifications.list_by_ids(ids)
        if len(found) != len(ids):
            v.fail("notification_ids", "The selected notification_ids is invalid.")
            v.validate()
        pending = [n for n in found if n.status == NotificationStatus.PENDING.value]
        return self._deliver_all(pending)

    def mark_read(self, notification_id: int, *, actor):
        notification = self.get(notification_id)
        if not is_admin(actor) and notification.user_id != actor.user_id:
            raise AuthorizationError("Unauthorized access")
        with self._transaction():
            notification.is_read = True
        return notification

    def delete(self, notification_id: int) -> None:
        notification = self.get(notification_id)
        with self._transaction():
            self._notifications.delete(notification)

    def mine(self, *, actor, page: int = 1):
        return self._notifications.paginate_for_user(actor.user_id, page=page, per_page=NOTIFICATIONS_PER_PAGE)

    def unread_count(self, *, actor) -> int:
        return self._notifications.unread_count(actor.user_id)

    def stats(self) -> dict:
        by_status = self._notifications.count_by_status()
        return {
            "total": sum(by_status.values()),
            "sent": by_status.get(NotificationStatus.SENT.value, 0),
            "pending": by_status.get(NotificationStatus.PENDING.value, 0),
            "failed": by_status.get(NotificationStatus.FAILED.value, 0),
            "by_type": self._notifications.count_by_type(),
            "recent_sent": self._notifications.count_sent_since(now_local() - timedelta(days=7)),
        }


class AnnouncementService:
    def __init__(
        self,
        announcements: AnnouncementRepository,
        notifications: NotificationRepository,
        students: StudentRepository,
        tutors: TutorRepository,
        classes: ClassRepository,
        subjects: SubjectRepository,
        *,
        sms: SmsSender,
        transaction: Transaction,
    ):
        self._announcements = announcements
        self._notifications = notifications
        self._students = students
        self._tutors = tutors
        self._classes = classes
        self._subjects = subjects
        self._sms = sms
        self._transaction = transaction

    def list_for(self, *, actor):
        """Admins see everything; others see what is addressed to them plus their own posts."""
        if is_admin(actor):
            return self._announcements.list_all()

        if has_role(actor, Role.STUDENT):
            student = actor_student(actor)
            class_ids = [student.class_id] if student and student.class_id else []
            subject_ids = [s.subject_id for s in student.subjects] if student else []
            audiences = [Audience.ALL.value, Audience.STUDENTS.value]
        else:
            subjects = self._subjects.list_filtered(tutor_id=actor_tutor_id(actor) or -1)
            class_ids = list({s.class_id for s in subjects})
            subject_ids = [s.subject_id for s in subjects]
            audiences = [Audience.ALL.value, Audience.TUTORS.value]

        return self._announcements.list_visible(
            audiences=audiences, class_ids=class_ids, subject_ids=subject_ids, created_by=actor.user_id
        )

    def get_for(self, announcement_id: int, *, actor):
        announcement = self._announcements.get(announcement_id)
        if announcement is None:
            raise NotFoundError("Announcement not found")
        if not is_admin(actor):
            visible = {a.announcement_id for a in self.list_for(actor=actor)}
            if announcement.announcement_id not in visible:
                raise AuthorizationError("Unauthorized access")
        return announcement

    def create(self, data: Mapping[str, Any], *, actor):
        v = FormValidator(data)
        title = v.string("title")
        message = v.string("message", max_length=2000)
        audience = v.choice("audience", [a.value for a in Audience], required=False) or Audience.ALL.value
        scope = v.choice("scope", [s.value for s in AnnouncementScope], required=False) or AnnouncementScope.ENTIRE_SYSTEM.value
        class_id = subject_id = None
        if scope == AnnouncementScope.CLASS.value:
            class_id = v.integer("class_id")
            if class_id is not None and self._classes.get(class_id) is None:
                v.fail("class_id", "The selected class_id is invalid.")
        elif scope == AnnouncementScope.SUBJECT.value:
            subject_id = v.integer("subject_id")
            if subject_id is not None and self._subjects.get(subject_id) is None:
                v.fail("subject_id", "The selected subject_id is invalid.")
        v.validate()

        if has_role(actor, Role.TUTOR) and audience != Audience.STUDENTS.value:
            raise AuthorizationError("Tutors can only send announcements to students")

        with self._transaction():
            announcement = self._announcements.add(
                title=title,
                message=message,
                audience=audience,
                scope=scope,
                class_id=class_id,
                subject_id=subject_id,
                created_by=actor.user_id,
            )

        try:
            delivered = self.broadcast(announcement)
        except Exception:
            logger.exception("Announcement %s broadcast failed", announcement.announcement_id)
        else:
            logger.info("Announcement %s broadcast to %d recipients", announcement.announcement_id, delivered)
        return announcement

    def recipients(self, announcement) -> List[Recipient]:
        audience = announcement.audience
        scope = announcement.scope
        out: Dict[int, Recipient] = {}

        if audience in (Audience.ALL.value, Audience.STUDENTS.value):
            if scope == AnnouncementScope.CLASS.value:
                students = self._students.search(class_id=announcement.class_id)
            elif scope == AnnouncementScope.SUBJECT.value:
                students = self._students.search(subject_ids=[announcement.subject_id])
            else:
                students = self._students.search()
            for s in students:
                phones = tuple(dict.fromkeys(p for p in (s.contact_no, s.guardian_contact) if p))
                out[s.user_id] = Recipient(user_id=s.user_id, student_id=s.student_id, phones=phones)

        if audience in (Audience.ALL.value, Audience.TUTORS.value):
            if scope == AnnouncementScope.CLASS.value:
                tutors = {s.tutor.tutor_id: s.tutor for s in self._subjects.list_filtered(class_id=announcement.class_id) if s.tutor}
                tutors = list(tutors.values())
            elif scope == AnnouncementScope.SUBJECT.value:
                subject = self._subjects.get(announcement.subject_id)
                tutors = [subject.tutor] if subject and subject.tutor else []
            else:
                tutors = self._tutors.list_active()
            for t in tutors:
                phones = (t.contact_no,) if t.contact_no else ()
                out[t.user_id] = Recipient(user_id=t.user_id, student_id=None, phones=phones)

        out.pop(announcement.created_by, None)
        return list(out.values())

    def broadcast(self, announcement) -> int:
        """Fan an announcement out to notifications and SMS; one bad recipient never stops the rest."""
        text = f"{announcement.title}: {announcement.message}"
        recipients = self.recipients(announcement)
        targets = [(recipient, phone) for recipient in recipients for phone in recipient.phones]
        results = self._sms.send_bulk([phone for _, phone in targets], text)

        failed_users = set()
        for (recipient, _), result in zip(targets, results):
            if not result.success:
                failed_users.add(recipient.user_id)
                logger.warning(
                    "Announcement %s SMS to user %s failed: %s",
                    announcement.announcement_id,
                    recipient.user_id,
                    result.message,
                )

        stored = 0
        for recipient in recipients:
            ok = recipient.user_id not in failed_users
            try:
                with self._transaction():
                    self._notifications.add(
                        title=announcement.title,
                        type=NotificationType.ANNOUNCEMENT.value,
                        message=announcement.message,
                        user_id=recipient.user_id,
                        student_id=recipient.student_id,
                        recipient_phone=recipient.phones[0] if recipient.phones else None,
                        status=NotificationStatus.SENT.value if ok else NotificationStatus.FAILED.value,
                        sent_date=now_local() if ok else None,
                    )
            except Exception:
                logger.exception(
                    "Announcement %s notification for user %s not stored",
                    announcement.announcement_id,
                    recipient.user_id,
                )
            else:
                stored += 1
        return stored

    def delete(self, announcement_id: int, *, actor) -> None:
        announcement = self._announcements.get(announcement_id)
        if announcement is None:
            raise NotFoundError("Announcement not found")
        if not is_admin(actor) and announcement.created_by != actor.user_id:
            raise AuthorizationError("Unauthorized access")
        with self._transaction():
            self._announcements.delete(announcement)
