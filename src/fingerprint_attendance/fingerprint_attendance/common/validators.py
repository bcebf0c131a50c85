from __future__ import annotations

from ..core.enums import Gender, Position
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_position(value: str | None) -> Position:
    try:
        return Position((value or "staff").strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid position {value!r}")


def optional_gender(value: str | None) -> Gender | None:
    if value is None or not str(value).strip():
        return None
    normalized = str(value).strip().capitalize()
    try:
        return Gender(normalized)
    except ValueError:
        raise ValidationError(f"Invalid gender {value!r}")
