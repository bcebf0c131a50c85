from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Gender, Position


@dataclass(frozen=True)
class User:
    """Thực thể miền (domain): User.

    fingerprint_template là cột cũ (legacy) chứa một mẫu vân tay base64; các mẫu
    mới được lưu trong bảng fingerprints.
    """

    user_id: int
    username: str
    password_hash: str
    position: Position
    gender: Optional[Gender] = None
    fingerprint_template: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.position == Position.ADMIN

    def to_public_dict(self) -> dict:
        return {
            "id": self.user_id,
            "username": self.username,
            "position": self.position.value,
            "gender": self.gender.value if self.gender else None,
            "hasFingerprint": bool(self.fingerprint_template),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
