from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Optional, Protocol, Sequence

from .model import Announcement, Notification


class NotificationRepository(Protocol):
    def get(self, notification_id: int) -> Optional[Notification]:
        raise NotImplementedError

    def add(self, **fields: Any) -> Notification:
        raise NotImplementedError

    def delete(self, notification: Notification) -> None:
        raise NotImplementedError

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
        raise NotImplementedError

    def list_by_ids(self, notification_ids: Iterable[int], *, status: Optional[str] = None) -> Sequence[Notification]:
        raise NotImplementedError

    def list_pending(self) -> Sequence[Notification]:
        raise NotImplementedError

    def paginate_for_user(self, user_id: int, *, page: int = 1, per_page: int = 20):
        raise NotImplementedError

    def unread_count(self, user_id: int) -> int:
        raise NotImplementedError

    def count_by_status(self) -> dict:
        raise NotImplementedError

    def count_by_type(self) -> dict:
        raise NotImplementedError

    def count_sent_since(self, since: datetime) -> int:
        raise NotImplementedError


class AnnouncementRepository(Protocol):
    def get(self, announcement_id: int) -> Optional[Announcement]:
        raise NotImplementedError

    def add(self, **fields: Any) -> Announcement:
        raise NotImplementedError

    def delete(self, announcement: Announcement) -> None:
        raise NotImplementedError

    def list_all(self) -> Sequence[Announcement]:
        raise NotImplementedError

    def list_visible(
        self,
        *,
        audiences: Iterable[str],
        class_ids: Iterable[int],
        subject_ids: Iterable[int],
        created_by: Optional[int] = None,
    ) -> Sequence[Announcement]:
        """Announcements addressed to one of ``audiences`` whose scope matches, newest first."""
        raise NotImplementedError
