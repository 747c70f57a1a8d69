from __future__ import annotations

from datetime import date, datetime, time
from typing import Iterable, Optional, Sequence

from sqlalchemy import and_, func, or_, select

from ..core.enums import AnnouncementScope, NotificationStatus
from ..database.sql_base import SqlRepository
from ..extensions import db
from .model import Announcement, Notification


class SqlNotificationRepository(SqlRepository[Notification]):
    model = Notification

    def paginate_filtered(
        self,
        *,
        type: Optional[str] = None,
        status: Optional[str] = None,
        student_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        page: int = 1,
        per_page: int = 20,
    ):
        stmt = select(Notification).order_by(Notification.created_at.desc(), Notification.notification_id.desc())
        if type:
            stmt = stmt.where(Notification.type == type)
        if status:
            stmt = stmt.where(Notification.status == status)
        if student_id is not None:
            stmt = stmt.where(Notification.student_id == int(student_id))
        if start is not None:
            stmt = stmt.where(Notification.created_at >= datetime.combine(start, time.min))
        if end is not None:
            stmt = stmt.where(Notification.created_at <= datetime.combine(end, time.max))
        return db.paginate(stmt, page=page, per_page=per_page, error_out=False)

    def list_by_ids(self, notification_ids: Iterable[int], *, status: Optional[str] = None) -> Sequence[Notification]:
        ids = [int(i) for i in notification_ids]
        if not ids:
            return []
        stmt = select(Notification).where(Notification.notification_id.in_(ids))
        if status:
            stmt = stmt.where(Notification.status == status)
        return self.scalars(stmt.order_by(Notification.notification_id))

    def list_pending(self) -> Sequence[Notification]:
        stmt = (
            select(Notification)
            .where(Notification.status == NotificationStatus.PENDING.value, Notification.recipient_phone.isnot(None))
            .order_by(Notification.notification_id)
        )
        return self.scalars(stmt)

    def paginate_for_user(self, user_id: int, *, page: int = 1, per_page: int = 20):
        stmt = (
            select(Notification)
            .where(Notification.user_id == int(user_id))
            .order_by(Notification.created_at.desc(), Notification.notification_id.desc())
        )
        return db.paginate(stmt, page=page, per_page=per_page, error_out=False)

    def unread_count(self, user_id: int) -> int:
        stmt = (
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == int(user_id), Notification.is_read.is_(False))
        )
        return int(self.session.scalar(stmt) or 0)

    def count_by_status(self) -> dict:
        rows = self.session.execute(select(Notification.status, func.count()).group_by(Notification.status))
        return {status: int(count) for status, count in rows}

    def count_by_type(self) -> dict:
        rows = self.session.execute(select(Notification.type, func.count()).group_by(Notification.type))
        return {kind: int(count) for kind, count in rows}

    def count_sent_since(self, since: datetime) -> int:
        stmt = (
            select(func.count())
            .select_from(Notification)
            .where(Notification.status == NotificationStatus.SENT.value, Notification.sent_date >= since)
        )
        return int(self.session.scalar(stmt) or 0)


class SqlAnnouncementRepository(SqlRepository[Announcement]):
    model = Announcement

    def list_all(self) -> Sequence[Announcement]:
        return self.scalars(select(Announcement).order_by(Announcement.created_at.desc(), Announcement.announcement_id.desc()))

    def list_visible(
        self,
        *,
        audiences: Iterable[str],
        class_ids: Iterable[int],
        subject_ids: Iterable[int],
        created_by: Optional[int] = None,
    ) -> Sequence[Announcement]:
        class_ids = list(class_ids)
        subject_ids = list(subject_ids)
        scope_match = or_(
            Announcement.scope == AnnouncementScope.ENTIRE_SYSTEM.value,
            and_(Announcement.scope == AnnouncementScope.CLASS.value, Announcement.class_id.in_(class_ids)),
            and_(Announcement.scope == AnnouncementScope.SUBJECT.value, Announcement.subject_id.in_(subject_ids)),
        )
        visible = and_(Announcement.audience.in_(list(audiences)), scope_match)
        if created_by is not None:
            visible = or_(visible, Announcement.created_by == int(created_by))
        stmt = select(Announcement).where(visible).order_by(
            Announcement.created_at.desc(), Announcement.announcement_id.desc()
        )
        return self.scalars(stmt)
