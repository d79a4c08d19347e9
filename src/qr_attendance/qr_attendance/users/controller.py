from __future__ import annotations

from typing import Any, Mapping

from flask import Flask, jsonify, request

from ..common.auth import admin_required, current_user, issue_token, login_required
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container
from .model import UserPatch


def _json_body() -> Mapping[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


def _patch_from_json(data: Mapping[str, Any]) -> UserPatch:
    role = None
    if data.get("role") is not None:
        try:
            role = Role(str(data["role"]).strip().lower())
        except ValueError:
            raise ValidationError("role must be 'admin' or 'employee'")

    is_active = data.get("active")
    if is_active is not None and not isinstance(is_active, bool):
        raise ValidationError("active must be true or false")

    return UserPatch(
        name=data.get("name"),
        email=data.get("email"),
        department=data.get("department"),
        position=data.get("position"),
        role=role,
        is_active=is_active,
        password=data.get("password"),
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        data = _json_body()
        user = container.auth_service.register(
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            department=data.get("department"),
            position=data.get("position"),
        )
        return jsonify({"success": True, "token": issue_token(user), "user": user.to_public_dict()}), 201

    @app.route("/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = _json_body()
        if not data.get("email") or not data.get("password"):
            raise ValidationError("Please provide an email and password")

        user = container.auth_service.authenticate(data["email"], data["password"])
        return jsonify({"success": True, "token": issue_token(user), "user": user.to_public_dict()})

    @app.route("/auth/profile", methods=["GET"], endpoint="auth_profile")
    @login_required
    def auth_profile():
        user = container.user_service.get_user(current_user().user_id)
        return jsonify({"success": True, "user": user.to_public_dict()})

    @app.route("/auth/profile", methods=["PUT"], endpoint="auth_profile_update")
    @login_required
    def auth_profile_update():
        user = container.user_service.update_profile(current_user().user_id, _patch_from_json(_json_body()))
        return jsonify({"success": True, "user": user.to_public_dict()})

    @app.route("/auth/forgot-password", methods=["POST"], endpoint="auth_forgot_password")
    def auth_forgot_password():
        container.auth_service.forgot_password(_json_body().get("email", ""))
        return jsonify({"success": True, "message": "Password reset email sent"})

    @app.route("/auth/reset-password/<token>", methods=["POST"], endpoint="auth_reset_password")
    def auth_reset_password(token: str):
        user = container.auth_service.reset_password(token, _json_body().get("password", ""))
        return jsonify({"success": True, "token": issue_token(user)})

    @app.route("/auth/users", methods=["GET"], endpoint="users_list")
    @admin_required
    def users_list():
        users = container.user_service.list_users(
            page=_int_arg("page", 1),
            limit=_int_arg("limit", DEFAULT_PAGE_SIZE),
            search=request.args.get("search", ""),
        )
        return jsonify({"success": True, "count": len(users), "data": [u.to_public_dict() for u in users]})

    @app.route("/auth/users/<int:user_id>", methods=["GET"], endpoint="users_get")
    @admin_required
    def users_get(user_id: int):
        user = container.user_service.get_user(user_id)
        return jsonify({"success": True, "user": user.to_public_dict()})

    @app.route("/auth/users/<int:user_id>", methods=["PUT"], endpoint="users_update")
    @admin_required
    def users_update(user_id: int):
        patch = _patch_from_json(_json_body())
        user = container.user_service.update_user(current_user(), user_id, patch)
        return jsonify({"success": True, "user": user.to_public_dict()})

    @app.route("/auth/users/<int:user_id>", methods=["DELETE"], endpoint="users_delete")
    @admin_required
    def users_delete(user_id: int):
        container.user_service.delete_user(current_user(), user_id)
        return jsonify({"success": True, "message": "User deleted successfully"})
