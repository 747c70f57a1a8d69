from __future__ import annotations

from ..common.datetime_utils import iso
from ..extensions import db


class Holiday(db.Model):
    __tablename__ = "holidays"

    holiday_id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    holiday_date = db.Column(db.Date, nullable=False, unique=True)

    def to_dict(self) -> dict:
        return {"holiday_id": self.holiday_id, "name": self.name, "holiday_date": iso(self.holiday_date)}


class Event(db.Model):
    __tablename__ = "events"

    event_id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    event_date = db.Column(db.Date, nullable=False)

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "title": self.title,
            "description": self.description,
            "event_date": iso(self.event_date),
        }
