from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from sqlalchemy import select

from ..database.sql_base import SqlRepository
from .model import Event, Holiday


class SqlHolidayRepository(SqlRepository[Holiday]):
    model = Holiday

    def list_all(self) -> Sequence[Holiday]:
        return self.scalars(select(Holiday).order_by(Holiday.holiday_date))

    def date_taken(self, holiday_date: date, *, exclude_id: Optional[int] = None) -> bool:
        stmt = select(Holiday.holiday_id).where(Holiday.holiday_date == holiday_date)
        if exclude_id is not None:
            stmt = stmt.where(Holiday.holiday_id != int(exclude_id))
        return self.session.scalar(stmt.limit(1)) is not None


class SqlEventRepository(SqlRepository[Event]):
    model = Event

    def list_all(self) -> Sequence[Event]:
        return self.scalars(select(Event).order_by(Event.event_date, Event.event_id))
