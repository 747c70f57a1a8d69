from __future__ import annotations

from datetime import date, time
from typing import Any, Iterable, Optional, Protocol, Sequence

from .model import ClassSchedule


class ScheduleRepository(Protocol):
    def get(self, schedule_id: int) -> Optional[ClassSchedule]:
        raise NotImplementedError

    def add(self, **fields: Any) -> ClassSchedule:
        raise NotImplementedError

    def delete(self, schedule: ClassSchedule) -> None:
        raise NotImplementedError

    def find_conflict(
        self,
        *,
        tutor_id: int,
        schedule_date: date,
        start_time: time,
        end_time: time,
        exclude_id: Optional[int] = None,
    ) -> Optional[ClassSchedule]:
        """First schedule of the tutor that day whose time range overlaps [start, end)."""
        raise NotImplementedError

    def list_filtered(
        self,
        *,
        class_id: Optional[int] = None,
        tutor_id: Optional[int] = None,
        subject_id: Optional[int] = None,
        subject_ids: Optional[Iterable[int]] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        statuses: Optional[Iterable[str]] = None,
    ) -> Sequence[ClassSchedule]:
        """Schedules ordered by date then start time."""
        raise NotImplementedError

    def paginate_before(self, *, tutor_id: int, before: date, page: int = 1, per_page: int = 20):
        raise NotImplementedError

    def count_on(self, day: date) -> int:
        raise NotImplementedError

    def count_for_tutor(self, tutor_id: int, *, status: Optional[str] = None, on_or_after: Optional[date] = None) -> int:
        raise NotImplementedError
