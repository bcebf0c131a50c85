"""Ví dụ: dùng service layer (không qua Flask).

Chấm công thủ công cho user 1 rồi in thống kê hôm nay.
"""

import importlib

from config import get_settings_module

from src.fingerprint_attendance.fingerprint_attendance.container import Options, build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, options=Options.from_settings(settings))

    result = container.attendance_service.record_time_log(1)
    print(result.to_dict())
    print(container.report_service.dashboard_summary().to_dict())


if __name__ == "__main__":
    main()
