from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from typing import Any, Callable, Mapping

from ..common.validators import FormValidator
from ..core.exceptions import NotFoundError
from .repository import EventRepository, HolidayRepository

logger = logging.getLogger(__name__)

Transaction = Callable[[], AbstractContextManager]


class HolidayService:
    def __init__(self, holidays: HolidayRepository, *, transaction: Transaction):
        self._holidays = holidays
        self._transaction = transaction

    def list_all(self):
        return self._holidays.list_all()

    def get(self, holiday_id: int):
        holiday = self._holidays.get(holiday_id)
        if holiday is None:
            raise NotFoundError("Holiday not found")
        return holiday

    def _read(self, data: Mapping[str, Any], *, exclude_id=None, partial: bool = False) -> dict:
        v = FormValidator(data)
        fields = {}
        if not partial or v.has("name"):
            fields["name"] = v.string("name")
        if not partial or v.has("holiday_date"):
            holiday_date = v.date("holiday_date")
            if holiday_date and self._holidays.date_taken(holiday_date, exclude_id=exclude_id):
                v.fail("holiday_date", "The holiday_date has already been taken.")
            fields["holiday_date"] = holiday_date
        v.validate()
        return fields

    def create(self, data: Mapping[str, Any]):
        fields = self._read(data)
        with self._transaction():
            holiday = self._holidays.add(**fields)
        logger.info("Holiday %s added for %s", holiday.holiday_id, holiday.holiday_date)
        return holiday

    def update(self, holiday_id: int, data: Mapping[str, Any]):
        holiday = self.get(holiday_id)
        fields = self._read(data, exclude_id=holiday.holiday_id, partial=True)
        with self._transaction():
            for key, value in fields.items():
                setattr(holiday, key, value)
        return holiday

    def delete(self, holiday_id: int) -> None:
        holiday = self.get(holiday_id)
        with self._transaction():
            self._holidays.delete(holiday)


class EventService:
    def __init__(self, events: EventRepository, *, transaction: Transaction):
        self._events = events
        self._transaction = transaction

    def list_all(self):
        return self._events.list_all()

    def get(self, event_id: int):
        event = self._events.get(event_id)
        if event is None:
            raise NotFoundError("Event not found")
        return event

    @staticmethod
    def _read(data: Mapping[str, Any], *, partial: bool = False) -> dict:
        v = FormValidator(data)
        fields = {}
        if not partial or v.has("title"):
            fields["title"] = v.string("title")
        if not partial or v.has("event_date"):
            fields["event_date"] = v.date("event_date")
        if v.has("description"):
            fields["description"] = v.string("description", required=False, max_length=None)
        v.validate()
        return fields

    def create(self, data: Mapping[str, Any]):
        fields = self._read(data)
        with self._transaction():
            return self._events.add(**fields)

    def update(self, event_id: int, data: Mapping[str, Any]):
        event = self.get(event_id)
        fields = self._read(data, partial=True)
        with self._transaction():
            for key, value in fields.items():
                setattr(event, key, value)
        return event

    def delete(self, event_id: int) -> None:
        event = self.get(event_id)
        with self._transaction():
            self._events.delete(event)
