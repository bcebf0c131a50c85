from __future__ import annotations

from enum import Enum

from .exceptions import ValidationError


class Position(str, Enum):
    """Vị trí / vai trò người dùng, đồng thời dùng cho phân quyền."""

    ADMIN = "admin"
    OFFICIAL = "official"
    STAFF = "staff"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"


class Remarks(str, Enum):
    """Nhãn phân loại lưu trong cột attendance.remarks (giữ nguyên chuỗi trong CSDL)."""

    ONTIME = "Ontime"
    LATE = "LATE"
    UNDERTIME = "Undertime"
    OVERTIME = "Overtime"

    @classmethod
    def parse(cls, value: str | None) -> "Remarks | None":
        if not value:
            return None
        lowered = str(value).strip().lower()
        for item in cls:
            if item.value.lower() == lowered:
                return item
        return None


class HalfDay(str, Enum):
    AM = "AM"
    PM = "PM"


class TimeLogMode(str, Enum):
    """Chế độ chấm công: AUTO tự suy ra ô thời gian, IN/OUT chỉ định thủ công."""

    AUTO = "AUTO"
    IN = "IN"
    OUT = "OUT"

    @classmethod
    def parse(cls, value: str | None) -> "TimeLogMode":
        if value is None or not str(value).strip():
            return cls.AUTO
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValidationError(f"Invalid mode {value!r}, expected IN, OUT or AUTO")


class TimeSlot(str, Enum):
    """Bốn ô thời gian của một bản ghi chấm công (tên cột trong CSDL)."""

    AM_TIME_IN = "am_time_in"
    AM_TIME_OUT = "am_time_out"
    PM_TIME_IN = "pm_time_in"
    PM_TIME_OUT = "pm_time_out"

    @property
    def half_day(self) -> HalfDay:
        return HalfDay.AM if self.value.startswith("am_") else HalfDay.PM

    @property
    def is_time_in(self) -> bool:
        return self.value.endswith("_in")

    @property
    def label(self) -> str:
        direction = "Time In" if self.is_time_in else "Time Out"
        return f"{self.half_day.value} {direction}"


class CandidateSource(str, Enum):
    TABLE = "table"
    LEGACY = "legacy"
