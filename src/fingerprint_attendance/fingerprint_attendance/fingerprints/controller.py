from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.http import auth_decorators, error_response, json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    token_required, admin_required = auth_decorators(container.auth_service)
    service = container.fingerprint_service

    def _template_from_request() -> str:
        if request.method == "GET":
            return request.args.get("fingerprintTemplate", "")
        return str(json_body().get("fingerprintTemplate") or "")

    @app.route("/api/fingerprint/verify", methods=["GET", "POST"], endpoint="fingerprint_verify")
    def fingerprint_verify():
        """1:N identification của mẫu vân tay gửi lên."""
        template = _template_from_request()
        if not template.strip():
            return jsonify({"success": False, "message": "Fingerprint template is required"}), 400
        try:
            return jsonify(service.identify_user(template).to_dict())
        except Exception as e:
            return error_response(e, context="fingerprint verify")

    @app.route("/api/fingerprint/verify/<int:user_id>", methods=["POST"], endpoint="fingerprint_verify_user")
    def fingerprint_verify_user(user_id: int):
        template = _template_from_request()
        if not template.strip():
            return jsonify({"success": False, "message": "Fingerprint template is required"}), 400
        try:
            return jsonify(service.verify_user(user_id, template).to_dict())
        except Exception as e:
            return error_response(e, context="fingerprint verify user")

    @app.route("/api/fingerprint/enroll", methods=["POST"], endpoint="fingerprint_enroll")
    @token_required
    def fingerprint_enroll():
        data = json_body()
        try:
            user_id = int(data.get("userId") or 0)
            if g.current_user.user_id != user_id and not g.current_user.is_admin:
                return jsonify({"success": False, "message": "You can only enroll your own fingerprint"}), 403
            fingerprint_id = service.enroll(
                user_id=user_id,
                template=str(data.get("fingerprintTemplate") or ""),
                finger_index=int(data.get("fingerIndex") or 0),
                quality=int(data["quality"]) if data.get("quality") is not None else None,
                capture_count=int(data.get("captureCount") or 1),
            )
            return jsonify({"success": True, "message": "Fingerprint enrolled successfully", "fingerprintId": fingerprint_id})
        except (TypeError, ValueError):
            return jsonify({"success": False, "message": "Invalid enrollment payload"}), 400
        except Exception as e:
            return error_response(e, context="fingerprint enroll")

    @app.route("/api/fingerprint/templates", methods=["GET"], endpoint="fingerprint_templates")
    @admin_required
    def fingerprint_templates():
        try:
            templates = service.list_templates()
            return jsonify({"success": True, "count": len(templates), "templates": templates})
        except Exception as e:
            return error_response(e, context="fingerprint templates")

    @app.route("/api/fingerprint/user/<int:user_id>", methods=["GET"], endpoint="fingerprint_user")
    @token_required
    def fingerprint_user(user_id: int):
        if g.current_user.user_id != user_id and not g.current_user.is_admin:
            return jsonify({"success": False, "message": "Access denied"}), 403
        try:
            rows = service.get_user_fingerprints(user_id)
            return jsonify({"success": True, "userId": user_id, "fingerprints": [r.to_dict() for r in rows]})
        except Exception as e:
            return error_response(e, context="fingerprint user")

    @app.route("/api/fingerprint/user/<int:user_id>", methods=["DELETE"], endpoint="fingerprint_user_delete")
    @admin_required
    def fingerprint_user_delete(user_id: int):
        try:
            removed = service.delete_fingerprints(user_id)
            return jsonify({"success": True, "message": "Fingerprint deleted", "removed": removed})
        except Exception as e:
            return error_response(e, context="fingerprint delete")

    @app.route("/api/fingerprint/status", methods=["GET"], endpoint="fingerprint_status")
    def fingerprint_status():
        try:
            scanner = container.scanner_service.status().to_dict()
            return jsonify({"success": True, **service.status(), "scanner": scanner})
        except Exception as e:
            return error_response(e, context="fingerprint status")
