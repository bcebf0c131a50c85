from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import json_body
from ..container import Container


def _reply(result):
    return jsonify(result.to_dict()), 200 if result.success else 400


def _bad_request(message: str):
    return jsonify({"success": False, "message": message}), 400


def register(app: Flask, container: Container) -> None:
    scanner = container.scanner_service

    @app.route("/api/scanner/status", methods=["GET"], endpoint="scanner_status")
    def scanner_status():
        return _reply(scanner.status())

    @app.route("/api/scanner/initialize", methods=["POST"], endpoint="scanner_initialize")
    def scanner_initialize():
        return _reply(scanner.initialize())

    @app.route("/api/scanner/detect", methods=["GET"], endpoint="scanner_detect")
    def scanner_detect():
        # Không tìm thấy thiết bị vẫn là phản hồi hợp lệ.
        return jsonify(scanner.detect().to_dict()), 200

    @app.route("/api/scanner/open", methods=["POST"], endpoint="scanner_open")
    def scanner_open():
        try:
            index = int(json_body().get("deviceIndex", 0))
        except (TypeError, ValueError):
            return _bad_request("deviceIndex must be an integer")
        return _reply(scanner.open_device(index))

    @app.route("/api/scanner/close", methods=["POST"], endpoint="scanner_close")
    def scanner_close():
        return _reply(scanner.close_device())

    @app.route("/api/scanner/capture", methods=["POST"], endpoint="scanner_capture")
    def scanner_capture():
        raw = json_body().get("timeoutSeconds")
        try:
            timeout = float(raw) if raw is not None else None
        except (TypeError, ValueError):
            return _bad_request("timeoutSeconds must be a number")
        return _reply(scanner.poll_capture(timeout))

    @app.route("/api/scanner/enroll", methods=["POST"], endpoint="scanner_enroll")
    def scanner_enroll():
        try:
            count = int(json_body().get("captureCount", 3))
        except (TypeError, ValueError):
            return _bad_request("captureCount must be an integer")
        return _reply(scanner.enroll(capture_count=count))

    @app.route("/api/scanner/match", methods=["POST"], endpoint="scanner_match")
    def scanner_match():
        data = json_body()
        if not data.get("template1") or not data.get("template2"):
            return _bad_request("template1 and template2 are required")
        return _reply(scanner.match_templates(data["template1"], data["template2"]))
