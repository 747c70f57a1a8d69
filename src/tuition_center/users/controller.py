from __future__ import annotations

from flask import Flask, g, request

from ..common.http import api_view, json_ok, request_data
from ..container import Container
from ..core.constants import API_PREFIX
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    auth = container.auth_service
    accounts = container.account_service

    @app.route(f"{API_PREFIX}/auth/login", methods=["POST"], endpoint="auth_login")
    @api_view
    def login():
        token, user = auth.login(request_data())
        return json_ok(
            {"token": token, "token_type": "Bearer", "user": user.summary()},
            message="Login successful",
        )

    @app.route(f"{API_PREFIX}/auth/logout", methods=["POST"], endpoint="auth_logout")
    @api_view
    @guards.login_required
    def logout():
        auth.logout(g.token_claims)
        return json_ok(message="Logged out successfully")

    @app.route(f"{API_PREFIX}/auth/me", methods=["GET"], endpoint="auth_me")
    @api_view
    @guards.login_required
    def me():
        return json_ok(g.current_user.summary())

    @app.route(f"{API_PREFIX}/auth/refresh", methods=["POST"], endpoint="auth_refresh")
    @api_view
    @guards.login_required
    def refresh():
        token = auth.refresh(g.token_claims, g.current_user)
        return json_ok({"token": token, "token_type": "Bearer"}, message="Token refreshed")

    @app.route(f"{API_PREFIX}/auth/change-password", methods=["POST"], endpoint="auth_change_password")
    @api_view
    @guards.login_required
    def change_password():
        auth.change_password(g.current_user, request_data())
        return json_ok(message="Password changed successfully")

    @app.route(f"{API_PREFIX}/admin/users", methods=["POST"], endpoint="admin_create_user")
    @api_view
    @guards.roles(Role.ADMIN)
    def create_user():
        user = accounts.create_user(
            request_data(), actor=g.current_user, photo=request.files.get("profile_photo")
        )
        return json_ok(user.summary(), message="User created successfully", status=201)

    @app.route(f"{API_PREFIX}/admin/users/<int:user_id>", methods=["DELETE"], endpoint="admin_delete_user")
    @api_view
    @guards.roles(Role.ADMIN)
    def delete_user(user_id: int):
        accounts.delete_user(user_id, actor=g.current_user)
        return json_ok(message="User deleted successfully")

    @app.route(f"{API_PREFIX}/admin/stats", methods=["GET"], endpoint="admin_stats")
    @api_view
    @guards.roles(Role.ADMIN)
    def stats():
        return json_ok(accounts.dashboard_stats())

    @app.route(f"{API_PREFIX}/admin/profile", methods=["GET"], endpoint="admin_profile")
    @api_view
    @guards.roles(Role.ADMIN)
    def admin_profile():
        profile = accounts.admin_profile(g.current_user)
        data = profile.to_dict() if profile is not None else None
        return json_ok({"user": g.current_user.to_dict(), "profile": data})

    @app.route(f"{API_PREFIX}/admin/profile", methods=["POST", "PUT"], endpoint="admin_profile_update")
    @api_view
    @guards.roles(Role.ADMIN)
    def update_admin_profile():
        profile = accounts.update_admin_profile(
            g.current_user, request_data(), photo=request.files.get("profile_photo")
        )
        return json_ok(profile.to_dict(), message="Profile updated successfully")
