from __future__ import annotations

from flask import Flask

from ..common.http import api_view, json_ok, request_data, serialize_all
from ..container import Container
from ..core.constants import API_PREFIX
from ..core.enums import Role


def _row(item) -> dict:
    return item.to_dict()


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    holidays = container.holiday_service
    events = container.event_service

    @app.route(f"{API_PREFIX}/holidays", methods=["GET"], endpoint="holidays_index")
    @api_view
    @guards.login_required
    def holidays_index():
        return json_ok(serialize_all(holidays.list_all(), _row))

    @app.route(f"{API_PREFIX}/holidays", methods=["POST"], endpoint="holidays_create")
    @api_view
    @guards.roles(Role.ADMIN)
    def holidays_create():
        return json_ok(_row(holidays.create(request_data())), message="Holiday created successfully", status=201)

    @app.route(f"{API_PREFIX}/holidays/<int:holiday_id>", methods=["PUT"], endpoint="holidays_update")
    @api_view
    @guards.roles(Role.ADMIN)
    def holidays_update(holiday_id: int):
        return json_ok(_row(holidays.update(holiday_id, request_data())), message="Holiday updated successfully")

    @app.route(f"{API_PREFIX}/holidays/<int:holiday_id>", methods=["DELETE"], endpoint="holidays_delete")
    @api_view
    @guards.roles(Role.ADMIN)
    def holidays_delete(holiday_id: int):
        holidays.delete(holiday_id)
        return json_ok(message="Holiday deleted successfully")

    @app.route(f"{API_PREFIX}/events", methods=["GET"], endpoint="events_index")
    @api_view
    @guards.login_required
    def events_index():
        return json_ok(serialize_all(events.list_all(), _row))

    @app.route(f"{API_PREFIX}/events", methods=["POST"], endpoint="events_create")
    @api_view
    @guards.roles(Role.ADMIN)
    def events_create():
        return json_ok(_row(events.create(request_data())), message="Event created successfully", status=201)

    @app.route(f"{API_PREFIX}/events/<int:event_id>", methods=["PUT"], endpoint="events_update")
    @api_view
    @guards.roles(Role.ADMIN)
    def events_update(event_id: int):
        return json_ok(_row(events.update(event_id, request_data())), message="Event updated successfully")

    @app.route(f"{API_PREFIX}/events/<int:event_id>", methods=["DELETE"], endpoint="events_delete")
    @api_view
    @guards.roles(Role.ADMIN)
    def events_delete(event_id: int):
        events.delete(event_id)
        return json_ok(message="Event deleted successfully")
