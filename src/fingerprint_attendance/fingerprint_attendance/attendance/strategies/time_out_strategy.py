from __future__ import annotations

from datetime import time
from typing import Optional

from ...core.enums import Remarks
from .base import RemarksStrategy, StatusDecision


class TimeOutStrategy(RemarksStrategy):
    """Time-out only writes remarks outside the normal window."""

    def __init__(self, undertime_before: time, overtime_after: Optional[time] = None):
        self.undertime_before = undertime_before
        self.overtime_after = overtime_after

    def decide(self, at: time) -> StatusDecision:
        if at < self.undertime_before:
            return StatusDecision(Remarks.UNDERTIME)
        if self.overtime_after is not None and at > self.overtime_after:
            return StatusDecision(Remarks.OVERTIME)
        return StatusDecision()
