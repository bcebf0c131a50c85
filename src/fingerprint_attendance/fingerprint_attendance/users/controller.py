from __future__ import annotations

from flask import Flask, g, jsonify

from ..common.http import auth_decorators, error_response, json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    token_required, admin_required = auth_decorators(container.auth_service)

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = json_body()
        try:
            auth = container.auth_service.login(str(data.get("username") or ""), str(data.get("password") or ""))
            return jsonify({"success": True, "message": "Login successful", **auth.to_dict()})
        except Exception as e:
            return error_response(e, context="login")

    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        data = json_body()
        try:
            user = container.auth_service.register(
                username=str(data.get("username") or ""),
                password=str(data.get("password") or ""),
                position=data.get("position"),
                gender=data.get("gender"),
                fingerprint_template=data.get("fingerprintTemplate"),
            )
            return jsonify({"success": True, "message": "Registration successful", "user": user.to_public_dict()}), 201
        except Exception as e:
            return error_response(e, context="register")

    @app.route("/api/auth/fingerprint-login", methods=["POST"], endpoint="auth_fingerprint_login")
    def auth_fingerprint_login():
        template = str(json_body().get("fingerprintTemplate") or "")
        if not template.strip():
            return jsonify({"success": False, "message": "Fingerprint template is required"}), 400
        try:
            auth = container.auth_service.login_with_fingerprint(template)
            return jsonify({"success": True, "message": "Login successful", **auth.to_dict()})
        except Exception as e:
            return error_response(e, context="fingerprint login")

    @app.route("/api/users", methods=["GET"], endpoint="users_list")
    @admin_required
    def users_list():
        try:
            users = container.user_service.list_users()
            return jsonify({"success": True, "users": [u.to_public_dict() for u in users]})
        except Exception as e:
            return error_response(e, context="list users")

    @app.route("/api/users/<int:user_id>", methods=["GET"], endpoint="users_get")
    @token_required
    def users_get(user_id: int):
        if g.current_user.user_id != user_id and not g.current_user.is_admin:
            return jsonify({"success": False, "message": "Access denied"}), 403
        try:
            return jsonify({"success": True, "user": container.user_service.get_user(user_id).to_public_dict()})
        except Exception as e:
            return error_response(e, context="get user")

    @app.route("/api/users/<int:user_id>", methods=["PUT"], endpoint="users_update")
    @token_required
    def users_update(user_id: int):
        data = json_body()
        try:
            user = container.user_service.update_profile(
                user_id,
                current=g.current_user,
                username=data.get("username"),
                position=data.get("position"),
                gender=data.get("gender"),
                password=data.get("password"),
            )
            return jsonify({"success": True, "message": "Profile updated", "user": user.to_public_dict()})
        except Exception as e:
            return error_response(e, context="update user")

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="users_delete")
    @admin_required
    def users_delete(user_id: int):
        try:
            container.user_service.delete_user(current=g.current_user, user_id=user_id)
            return jsonify({"success": True, "message": "User deleted"})
        except Exception as e:
            return error_response(e, context="delete user")
