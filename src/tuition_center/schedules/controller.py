from __future__ import annotations

from flask import Flask, g

from ..common.http import api_view, json_ok, query_date, query_int, query_str, request_data, serialize_all
from ..container import Container
from ..core.constants import API_PREFIX
from ..core.enums import Role


def _row(schedule) -> dict:
    return schedule.to_dict()


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    schedules = container.schedule_service

    @app.route(f"{API_PREFIX}/schedules", methods=["GET"], endpoint="schedules_index")
    @api_view
    @guards.login_required
    def index():
        rows = schedules.list_for(
            actor=g.current_user,
            class_id=query_int("class_id"),
            tutor_id=query_int("tutor_id"),
            subject_id=query_int("subject_id"),
            on=query_date("date"),
            range_name=query_str("range"),
        )
        return json_ok(serialize_all(rows, _row))

    @app.route(f"{API_PREFIX}/schedules/options", methods=["GET"], endpoint="schedules_options")
    @api_view
    @guards.login_required
    def options():
        return json_ok(schedules.options(actor=g.current_user))

    @app.route(f"{API_PREFIX}/schedules/<int:schedule_id>", methods=["GET"], endpoint="schedules_show")
    @api_view
    @guards.login_required
    def show(schedule_id: int):
        return json_ok(_row(schedules.get(schedule_id)))

    @app.route(f"{API_PREFIX}/schedules", methods=["POST"], endpoint="schedules_create")
    @api_view
    @guards.roles(Role.ADMIN, Role.TUTOR)
    def create():
        schedule = schedules.create(request_data(), actor=g.current_user)
        return json_ok(_row(schedule), message="Schedule created successfully", status=201)

    @app.route(f"{API_PREFIX}/schedules/<int:schedule_id>", methods=["PUT", "POST"], endpoint="schedules_update")
    @api_view
    @guards.roles(Role.ADMIN, Role.TUTOR)
    def update(schedule_id: int):
        schedule = schedules.update(schedule_id, request_data(), actor=g.current_user)
        return json_ok(_row(schedule), message="Schedule updated successfully")

    @app.route(f"{API_PREFIX}/schedules/<int:schedule_id>", methods=["DELETE"], endpoint="schedules_delete")
    @api_view
    @guards.roles(Role.ADMIN, Role.TUTOR)
    def delete(schedule_id: int):
        schedules.delete(schedule_id, actor=g.current_user)
        return json_ok(message="Schedule deleted successfully")
