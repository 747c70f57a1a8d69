from __future__ import annotations

from flask import Flask, g

from ..common.http import api_view, json_ok, page_payload, query_int, query_page, query_str, request_data, serialize_all
from ..container import Container
from ..core.constants import API_PREFIX
from ..core.enums import Role


def _row(fee) -> dict:
    return fee.to_dict()


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    fees = container.fee_service

    @app.route(f"{API_PREFIX}/fees", methods=["GET"], endpoint="fees_index")
    @api_view
    @guards.roles(Role.ADMIN)
    def index():
        rows = fees.list_fees(
            status=query_str("status"),
            month=query_str("month"),
            class_id=query_int("class_id"),
            student_id=query_int("student_id"),
            search=query_str("search"),
            sort=query_str("sort"),
        )
        return json_ok(serialize_all(rows, _row))

    @app.route(f"{API_PREFIX}/fees", methods=["POST"], endpoint="fees_create")
    @api_view
    @guards.roles(Role.ADMIN)
    def create():
        fee = fees.create(request_data(), actor=g.current_user)
        return json_ok(_row(fee), message="Fee record created successfully", status=201)

    @app.route(f"{API_PREFIX}/fees/generate", methods=["POST"], endpoint="fees_generate")
    @api_view
    @guards.roles(Role.ADMIN)
    def generate():
        result = fees.generate_monthly(request_data(), actor=g.current_user)
        return json_ok(result, message=result["message"])

    @app.route(f"{API_PREFIX}/fees/<int:fee_id>", methods=["GET"], endpoint="fees_show")
    @api_view
    @guards.roles(Role.ADMIN)
    def show(fee_id: int):
        return json_ok(_row(fees.get(fee_id)))

    @app.route(f"{API_PREFIX}/fees/<int:fee_id>", methods=["PUT"], endpoint="fees_update")
    @api_view
    @guards.roles(Role.ADMIN)
    def update(fee_id: int):
        return json_ok(_row(fees.update(fee_id, request_data())), message="Fee record updated successfully")

    @app.route(f"{API_PREFIX}/fees/<int:fee_id>", methods=["DELETE"], endpoint="fees_delete")
    @api_view
    @guards.roles(Role.ADMIN)
    def delete(fee_id: int):
        fees.delete(fee_id)
        return json_ok(message="Fee record deleted successfully")

    @app.route(f"{API_PREFIX}/fees/<int:fee_id>/pay", methods=["POST"], endpoint="fees_pay")
    @api_view
    @guards.roles(Role.ADMIN)
    def pay(fee_id: int):
        fee = fees.mark_paid(fee_id, actor=g.current_user)
        return json_ok(_row(fee), message="Fee marked as paid")

    @app.route(f"{API_PREFIX}/fees/<int:fee_id>/remind", methods=["POST"], endpoint="fees_remind")
    @api_view
    @guards.roles(Role.ADMIN)
    def remind(fee_id: int):
        return json_ok(fees.remind(fee_id), message="Reminder sent successfully")

    @app.route(f"{API_PREFIX}/student/fees", methods=["GET"], endpoint="student_own_fees")
    @api_view
    @guards.roles(Role.STUDENT)
    def own_fees():
        result = fees.student_fees(actor=g.current_user, page=query_page())
        return json_ok(page_payload(result["pagination"], _row), summary=result["summary"])
