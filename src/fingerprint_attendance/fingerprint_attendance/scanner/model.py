from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.constants import SCANNER_MODEL


@dataclass(frozen=True)
class DeviceInfo:
    width: int
    height: int
    dpi: int
    model: str = SCANNER_MODEL


@dataclass(frozen=True)
class ScannerStatus:
    sdk_initialized: bool
    device_count: int
    device_open: bool = False
    db_cache_ready: bool = False
    device_info: Optional[DeviceInfo] = None


@dataclass(frozen=True)
class CaptureResult:
    template: bytes
    image: bytes
    width: int
    height: int


@dataclass(frozen=True)
class IdentifyResult:
    """1:N result from the native cache; candidate_id is the caller's own key."""

    matched: bool
    candidate_id: Optional[object] = None
    score: int = 0


@dataclass(frozen=True)
class OperationResult:
    """Structured outcome returned across the scanner service boundary."""

    success: bool
    message: str
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"success": self.success, "message": self.message, **self.data}
