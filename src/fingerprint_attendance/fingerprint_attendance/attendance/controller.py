from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from flask import Flask, Response, g, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import auth_decorators, error_response, json_body
from ..core.exceptions import ValidationError
from ..container import Container


def _date_arg(name: str) -> Optional[date]:
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f"{name} must be YYYY-MM-DD")


def register(app: Flask, container: Container) -> None:
    token_required, admin_required = auth_decorators(container.auth_service)
    service = container.attendance_service

    def _reply(result):
        return jsonify(result.to_dict()), 200

    @app.route("/api/attendance/fingerprint", methods=["POST"], endpoint="attendance_fingerprint")
    def attendance_fingerprint():
        """Chấm công bằng vân tay: nhận diện 1:N rồi ghi ô thời gian (auto hoặc IN/OUT)."""
        data = json_body()
        try:
            result = service.record_fingerprint_time_log(
                str(data.get("fingerprintTemplate") or ""),
                mode=data.get("mode"),
            )
            return _reply(result)
        except Exception as e:
            return error_response(e, context="fingerprint time log")

    @app.route("/api/attendance/timelog/<int:user_id>", methods=["POST"], endpoint="attendance_timelog")
    @token_required
    def attendance_timelog(user_id: int):
        if g.current_user.user_id != user_id and not g.current_user.is_admin:
            return jsonify({"success": False, "message": "You can only log time for yourself"}), 403
        try:
            return _reply(service.record_time_log(user_id))
        except Exception as e:
            return error_response(e, context="time log")

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    def attendance_today():
        try:
            rows = service.get_today_logs()
            return jsonify({"success": True, "count": len(rows), "records": [r.to_dict() for r in rows]})
        except Exception as e:
            return error_response(e, context="today logs")

    @app.route("/api/attendance/today/entries", methods=["GET"], endpoint="attendance_today_entries")
    def attendance_today_entries():
        try:
            limit = int(request.args.get("limit", 20))
        except ValueError:
            return jsonify({"success": False, "message": "limit must be an integer"}), 400
        try:
            entries = service.get_today_entries(limit=limit)
            return jsonify({"success": True, "entries": [e.to_dict() for e in entries]})
        except Exception as e:
            return error_response(e, context="today entries")

    @app.route("/api/attendance/user/<int:user_id>", methods=["GET"], endpoint="attendance_user")
    @token_required
    def attendance_user(user_id: int):
        if g.current_user.user_id != user_id and not g.current_user.is_admin:
            return jsonify({"success": False, "message": "Access denied"}), 403
        try:
            rows = service.get_user_attendance(user_id, start_date=_date_arg("startDate"), end_date=_date_arg("endDate"))
            return jsonify({"success": True, "records": [r.to_dict() for r in rows]})
        except Exception as e:
            return error_response(e, context="user attendance")

    @app.route("/api/attendance/user/<int:user_id>/today", methods=["GET"], endpoint="attendance_user_today")
    @token_required
    def attendance_user_today(user_id: int):
        try:
            row = service.get_user_today(user_id)
            return jsonify({"success": True, "record": row.to_dict() if row else None})
        except Exception as e:
            return error_response(e, context="user today")

    @app.route("/api/attendance/all", methods=["GET"], endpoint="attendance_all")
    @admin_required
    def attendance_all():
        try:
            rows = service.get_all_attendance(
                start_date=_date_arg("startDate"),
                end_date=_date_arg("endDate"),
                search_name=request.args.get("searchName"),
            )
            return jsonify({"success": True, "count": len(rows), "records": [r.to_dict() for r in rows]})
        except Exception as e:
            return error_response(e, context="all attendance")

    @app.route("/api/attendance/records", methods=["GET"], endpoint="attendance_records")
    def attendance_records():
        try:
            rows = service.get_all_attendance(
                start_date=_date_arg("startDate"),
                end_date=_date_arg("endDate"),
                search_name=request.args.get("searchName"),
            )
            return jsonify([r.to_dict() for r in rows])
        except Exception as e:
            return error_response(e, context="records")

    @app.route("/api/attendance/records.csv", methods=["GET"], endpoint="attendance_records_csv")
    def attendance_records_csv():
        try:
            rows = service.get_all_attendance(
                start_date=_date_arg("startDate"),
                end_date=_date_arg("endDate"),
                search_name=request.args.get("searchName"),
            )
        except Exception as e:
            return error_response(e, context="records export")

        filename = f"attendance_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
        return Response(
            service.export_csv(rows),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
