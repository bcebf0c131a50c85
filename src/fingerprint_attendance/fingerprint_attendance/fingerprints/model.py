from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import CandidateSource


@dataclass(frozen=True)
class Fingerprint:
    fingerprint_id: int
    user_id: int
    template: str
    finger_index: int = 0
    quality: Optional[int] = None
    capture_count: int = 1
    registered_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.fingerprint_id,
            "userId": self.user_id,
            "fingerprintTemplate": self.template,
            "fingerIndex": self.finger_index,
            "quality": self.quality,
            "captureCount": self.capture_count,
            "registeredAt": self.registered_at.isoformat() if self.registered_at else None,
        }


@dataclass(frozen=True)
class Candidate:
    """One stored template that a sample may be compared against."""

    user_id: int
    username: str
    position: Optional[str]
    template: str
    source: CandidateSource = CandidateSource.TABLE
    finger_index: int = 0


@dataclass(frozen=True)
class MatchResult:
    success: bool
    matched: bool
    score: float = 0.0
    message: str = ""
    user_id: Optional[int] = None
    username: Optional[str] = None
    position: Optional[str] = None

    @classmethod
    def failure(cls, message: str) -> "MatchResult":
        return cls(success=False, matched=False, message=message)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "matched": self.matched,
            "userId": self.user_id,
            "username": self.username,
            "position": self.position,
            "score": round(self.score, 2),
            "message": self.message,
        }
