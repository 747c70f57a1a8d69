from __future__ import annotations

from datetime import date
from typing import Any, Optional, Protocol, Sequence

from .model import Event, Holiday


class HolidayRepository(Protocol):
    def get(self, holiday_id: int) -> Optional[Holiday]:
        raise NotImplementedError

    def add(self, **fields: Any) -> Holiday:
        raise NotImplementedError

    def delete(self, holiday: Holiday) -> None:
        raise NotImplementedError

    def list_all(self) -> Sequence[Holiday]:
        raise NotImplementedError

    def date_taken(self, holiday_date: date, *, exclude_id: Optional[int] = None) -> bool:
        raise NotImplementedError


class EventRepository(Protocol):
    def get(self, event_id: int) -> Optional[Event]:
        raise NotImplementedError

    def add(self, **fields: Any) -> Event:
        raise NotImplementedError

    def delete(self, event: Event) -> None:
        raise NotImplementedError

    def list_all(self) -> Sequence[Event]:
        raise NotImplementedError
