from __future__ import annotations

from flask import Flask, g

from ..common.http import api_view, json_ok, page_payload, query_int, query_page, query_str, request_data, serialize_all
from ..container import Container
from ..core.constants import API_PREFIX
from ..core.enums import Role


def _row(salary) -> dict:
    return salary.to_dict()


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    salaries = container.salary_service

    @app.route(f"{API_PREFIX}/salaries", methods=["GET"], endpoint="salaries_index")
    @api_view
    @guards.roles(Role.ADMIN)
    def index():
        rows = salaries.list_salaries(
            month=query_str("month"), status=query_str("status"), tutor_id=query_int("tutor_id")
        )
        return json_ok(serialize_all(rows, _row))

    @app.route(f"{API_PREFIX}/salaries", methods=["POST"], endpoint="salaries_create")
    @api_view
    @guards.roles(Role.ADMIN)
    def create():
        salary = salaries.create(request_data(), actor=g.current_user)
        return json_ok(_row(salary), message="Salary record created successfully", status=201)

    @app.route(f"{API_PREFIX}/salaries/generate", methods=["POST"], endpoint="salaries_generate")
    @api_view
    @guards.roles(Role.ADMIN)
    def generate():
        result = salaries.generate_monthly(request_data(), actor=g.current_user)
        return json_ok(result, message=result["message"])

    @app.route(f"{API_PREFIX}/salaries/<int:salary_id>", methods=["GET"], endpoint="salaries_show")
    @api_view
    @guards.roles(Role.ADMIN)
    def show(salary_id: int):
        return json_ok(_row(salaries.get(salary_id)))

    @app.route(f"{API_PREFIX}/salaries/<int:salary_id>", methods=["PUT"], endpoint="salaries_update")
    @api_view
    @guards.roles(Role.ADMIN)
    def update(salary_id: int):
        salary = salaries.update(salary_id, request_data())
        return json_ok(_row(salary), message="Salary record updated successfully")

    @app.route(f"{API_PREFIX}/salaries/<int:salary_id>", methods=["DELETE"], endpoint="salaries_delete")
    @api_view
    @guards.roles(Role.ADMIN)
    def delete(salary_id: int):
        salaries.delete(salary_id)
        return json_ok(message="Salary record deleted successfully")

    @app.route(f"{API_PREFIX}/salaries/<int:salary_id>/pay", methods=["POST"], endpoint="salaries_pay")
    @api_view
    @guards.roles(Role.ADMIN)
    def pay(salary_id: int):
        salary = salaries.mark_paid(salary_id, actor=g.current_user)
        return json_ok(_row(salary), message="Salary marked as paid")

    @app.route(f"{API_PREFIX}/tutor/salaries", methods=["GET"], endpoint="tutor_own_salaries")
    @api_view
    @guards.roles(Role.TUTOR)
    def own_salaries():
        result = salaries.tutor_salaries(actor=g.current_user, page=query_page())
        return json_ok(page_payload(result["pagination"], _row), summary=result["summary"])
