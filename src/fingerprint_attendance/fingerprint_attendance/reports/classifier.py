from __future__ import annotations

from typing import Optional

CATEGORIES = ("Ontime", "Late", "Undertime", "Overtime")


def classify_remarks(value: Optional[str]) -> Optional[str]:
    """Map a stored remarks label to a report category (substring match, first rule wins)."""

    if not value:
        return None
    lowered = value.strip().lower()
    if "ontime" in lowered or "on time" in lowered:
        return "Ontime"
    if "late" in lowered:
        return "Late"
    if "undertime" in lowered:
        return "Undertime"
    if "overtime" in lowered:
        return "Overtime"
    return None


def normalize_position(value: Optional[str]) -> str:
    lowered = (value or "").strip().lower()
    # Legacy rows spell it 'offical'.
    return "official" if lowered == "offical" else lowered
