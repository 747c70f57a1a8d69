from __future__ import annotations

from flask import Flask, g, request

from ..common.http import api_view, json_ok, page_payload, query_date, query_page, query_str, request_data, serialize_all
from ..container import Container
from ..core.constants import API_PREFIX
from ..core.enums import Role


def _tutor_row(tutor) -> dict:
    return tutor.to_dict(with_subjects=True)


def _schedule_row(schedule) -> dict:
    return schedule.to_dict()


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    tutors = container.tutor_service

    @app.route(f"{API_PREFIX}/tutors", methods=["GET"], endpoint="tutors_index")
    @api_view
    @guards.roles(Role.ADMIN)
    def index():
        pagination = tutors.search(search=query_str("search"), status=query_str("status"), page=query_page())
        return json_ok(page_payload(pagination, _tutor_row))

    @app.route(f"{API_PREFIX}/tutors/active", methods=["GET"], endpoint="tutors_active")
    @api_view
    @guards.login_required
    def active():
        subject = query_str("subject")
        rows = tutors.by_subject(subject) if subject else tutors.active()
        return json_ok(serialize_all(rows, lambda t: t.to_dict()))

    @app.route(f"{API_PREFIX}/tutors/stats", methods=["GET"], endpoint="tutors_stats")
    @api_view
    @guards.roles(Role.ADMIN)
    def stats():
        return json_ok(tutors.stats_overview())

    @app.route(f"{API_PREFIX}/tutors/<int:tutor_id>", methods=["GET"], endpoint="tutors_show")
    @api_view
    @guards.roles(Role.ADMIN, Role.TUTOR)
    def show(tutor_id: int):
        tutor = tutors.get_for(tutor_id, actor=g.current_user)
        return json_ok(tutor.to_dict(with_subjects=True, with_salaries=True))

    @app.route(f"{API_PREFIX}/tutors/<int:tutor_id>", methods=["POST", "PUT"], endpoint="tutors_update")
    @api_view
    @guards.roles(Role.ADMIN, Role.TUTOR)
    def update(tutor_id: int):
        tutor = tutors.update(
            tutor_id, request_data(), actor=g.current_user, photo=request.files.get("profile_photo")
        )
        return json_ok(_tutor_row(tutor), message="Tutor updated successfully")

    @app.route(f"{API_PREFIX}/tutors/<int:tutor_id>", methods=["DELETE"], endpoint="tutors_delete")
    @api_view
    @guards.roles(Role.ADMIN)
    def delete(tutor_id: int):
        tutors.delete(tutor_id)
        return json_ok(message="Tutor deleted successfully")

    @app.route(f"{API_PREFIX}/tutors/<int:tutor_id>/stats", methods=["GET"], endpoint="tutors_stats_for")
    @api_view
    @guards.roles(Role.ADMIN, Role.TUTOR)
    def stats_for(tutor_id: int):
        return json_ok(tutors.stats_for(tutor_id, actor=g.current_user))

    @app.route(f"{API_PREFIX}/tutors/<int:tutor_id>/history", methods=["GET"], endpoint="tutors_history")
    @api_view
    @guards.roles(Role.ADMIN, Role.TUTOR)
    def history(tutor_id: int):
        pagination = tutors.history(tutor_id, actor=g.current_user, page=query_page())
        return json_ok(page_payload(pagination, _schedule_row))

    @app.route(f"{API_PREFIX}/tutor/profile", methods=["GET"], endpoint="tutor_own_profile")
    @api_view
    @guards.roles(Role.TUTOR)
    def own_profile():
        tutor = tutors.profile_of(g.current_user)
        return json_ok(tutor.to_dict(with_subjects=True, with_salaries=True))

    @app.route(f"{API_PREFIX}/tutor/classes", methods=["GET"], endpoint="tutor_own_classes")
    @api_view
    @guards.roles(Role.TUTOR)
    def own_classes():
        rows = tutors.my_classes(actor=g.current_user, start=query_date("start_date"), end=query_date("end_date"))
        return json_ok(serialize_all(rows, _schedule_row))

    @app.route(f"{API_PREFIX}/tutor/classes/today", methods=["GET"], endpoint="tutor_today_classes")
    @api_view
    @guards.roles(Role.TUTOR)
    def today_classes():
        return json_ok(serialize_all(tutors.today_classes(actor=g.current_user), _schedule_row))
