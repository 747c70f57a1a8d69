from __future__ import annotations

from flask import Flask, g

from ..common.http import (
    api_view,
    json_ok,
    page_payload,
    query_date,
    query_int,
    query_page,
    query_str,
    request_data,
    serialize_all,
)
from ..container import Container
from ..core.constants import API_PREFIX
from ..core.enums import Role


def _row(item) -> dict:
    return item.to_dict()


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    notifications = container.notification_service
    announcements = container.announcement_service

    @app.route(f"{API_PREFIX}/announcements", methods=["GET"], endpoint="announcements_index")
    @api_view
    @guards.login_required
    def announcements_index():
        return json_ok(serialize_all(announcements.list_for(actor=g.current_user), _row))

    @app.route(f"{API_PREFIX}/announcements", methods=["POST"], endpoint="announcements_create")
    @api_view
    @guards.roles(Role.ADMIN, Role.TUTOR)
    def announcements_create():
        announcement = announcements.create(request_data(), actor=g.current_user)
        return json_ok(_row(announcement), message="Announcement created and sent successfully", status=201)

    @app.route(f"{API_PREFIX}/announcements/<int:announcement_id>", methods=["GET"], endpoint="announcements_show")
    @api_view
    @guards.login_required
    def announcements_show(announcement_id: int):
        return json_ok(_row(announcements.get_for(announcement_id, actor=g.current_user)))

    @app.route(
        f"{API_PREFIX}/announcements/<int:announcement_id>", methods=["DELETE"], endpoint="announcements_delete"
    )
    @api_view
    @guards.login_required
    def announcements_delete(announcement_id: int):
        announcements.delete(announcement_id, actor=g.current_user)
        return json_ok(message="Announcement deleted successfully")

    @app.route(f"{API_PREFIX}/notifications", methods=["GET"], endpoint="notifications_index")
    @api_view
    @guards.roles(Role.ADMIN)
    def notifications_index():
        pagination = notifications.search(
            type=query_str("type"),
            status=query_str("status"),
            student_id=query_int("student_id"),
            start=query_date("start_date"),
            end=query_date("end_date"),
            page=query_page(),
        )
        return json_ok(page_payload(pagination, _row))

    @app.route(f"{API_PREFIX}/notifications", methods=["POST"], endpoint="notifications_create")
    @api_view
    @guards.roles(Role.ADMIN)
    def notifications_create():
        notification = notifications.create(request_data())
        return json_ok(_row(notification), message="Notification created successfully", status=201)

    @app.route(f"{API_PREFIX}/notifications/my", methods=["GET"], endpoint="notifications_mine")
    @api_view
    @guards.login_required
    def notifications_mine():
        pagination = notifications.mine(actor=g.current_user, page=query_page())
        return json_ok(page_payload(pagination, _row))

    @app.route(f"{API_PREFIX}/notifications/unread-count", methods=["GET"], endpoint="notifications_unread")
    @api_view
    @guards.login_required
    def notifications_unread():
        return json_ok({"count": notifications.unread_count(actor=g.current_user)})

    @app.route(f"{API_PREFIX}/notifications/stats", methods=["GET"], endpoint="notifications_stats")
    @api_view
    @guards.roles(Role.ADMIN)
    def notifications_stats():
        return json_ok(notifications.stats())

    @app.route(f"{API_PREFIX}/notifications/send-pending", methods=["POST"], endpoint="notifications_send_pending")
    @api_view
    @guards.roles(Role.ADMIN)
    def notifications_send_pending():
        counts = notifications.send_pending()
        return json_ok(counts, message=f"Sent: {counts['sent']}, Failed: {counts['failed']}")

    @app.route(f"{API_PREFIX}/notifications/bulk-send", methods=["POST"], endpoint="notifications_bulk_send")
    @api_view
    @guards.roles(Role.ADMIN)
    def notifications_bulk_send():
        counts = notifications.bulk_send(request_data())
        return json_ok(counts, message=f"Sent: {counts['sent']}, Failed: {counts['failed']}")

    @app.route(f"{API_PREFIX}/notifications/<int:notification_id>", methods=["GET"], endpoint="notifications_show")
    @api_view
    @guards.roles(Role.ADMIN)
    def notifications_show(notification_id: int):
        return json_ok(_row(notifications.get(notification_id)))

    @app.route(
        f"{API_PREFIX}/notifications/<int:notification_id>", methods=["DELETE"], endpoint="notifications_delete"
    )
    @api_view
    @guards.roles(Role.ADMIN)
    def notifications_delete(notification_id: int):
        notifications.delete(notification_id)
        return json_ok(message="Notification deleted successfully")

    @app.route(
        f"{API_PREFIX}/notifications/<int:notification_id>/send", methods=["POST"], endpoint="notifications_send"
    )
    @api_view
    @guards.roles(Role.ADMIN)
    def notifications_send(notification_id: int):
        notification = notifications.send(notification_id)
        return json_ok(_row(notification), message="Notification sent successfully")

    @app.route(
        f"{API_PREFIX}/notifications/<int:notification_id>/read",
        methods=["POST", "PUT"],
        endpoint="notifications_read",
    )
    @api_view
    @guards.login_required
    def notifications_read(notification_id: int):
        notification = notifications.mark_read(notification_id, actor=g.current_user)
        return json_ok(_row(notification), message="Notification marked as read")
