from __future__ import annotations

from datetime import date
from typing import Any, Optional, Protocol, Sequence, Tuple

from .model import Attendance


class AttendanceRepository(Protocol):
    def get_for(self, *, schedule_id: int, student_id: int) -> Optional[Attendance]:
        raise NotImplementedError

    def add(self, **fields: Any) -> Attendance:
        raise NotImplementedError

    def list_for_schedule(self, schedule_id: int) -> Sequence[Attendance]:
        raise NotImplementedError

    def recent_statuses(self, student_id: int, *, limit: int) -> Sequence[str]:
        """Latest statuses of the student, newest first."""
        raise NotImplementedError

    def daily_counts(self, *, start: date, end: date, tutor_id: Optional[int] = None) -> Sequence[Tuple[date, int, int]]:
        """(day, attended, total) for each day with at least one record."""
        raise NotImplementedError

    def list_completed_for_student(self, student_id: int) -> Sequence[Attendance]:
        """Records whose schedule is Completed, newest first."""
        raise NotImplementedError
