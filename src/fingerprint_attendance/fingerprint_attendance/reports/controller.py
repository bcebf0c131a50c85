from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import error_response
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.report_service

    @app.route("/api/dashboard-summary", methods=["GET"], endpoint="dashboard_summary")
    @app.route("/api/attendance/home/dashboard-summary", methods=["GET"], endpoint="dashboard_summary_legacy")
    def dashboard_summary():
        raw = (request.args.get("date") or "").strip()
        try:
            day = parse_iso_date(raw) if raw else None
        except ValueError:
            return jsonify({"success": False, "message": "date must be YYYY-MM-DD"}), 400
        try:
            return jsonify(service.dashboard_summary(day).to_dict())
        except Exception as e:
            return error_response(e, context="dashboard summary")

    @app.route("/api/report/summary", methods=["GET"], endpoint="report_summary")
    def report_summary():
        month = (request.args.get("month") or "").strip()
        if not month:
            return jsonify({"success": False, "message": "Month is required"}), 400
        try:
            summary = service.monthly_report(
                month,
                position=request.args.get("position"),
                search_name=request.args.get("searchName"),
            )
            return jsonify(summary.to_dict())
        except Exception as e:
            return error_response(e, context="report summary")

    @app.route("/api/trend", methods=["GET"], endpoint="trend")
    def trend():
        try:
            points = service.daily_trend(
                month=(request.args.get("month") or "").strip() or None,
                employee=request.args.get("employee"),
            )
            return jsonify({"ok": True, "data": [p.to_dict() for p in points]})
        except Exception as e:
            return error_response(e, context="trend")
