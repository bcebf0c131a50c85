from __future__ import annotations

from datetime import time

from ...core.enums import Remarks
from .base import RemarksStrategy, StatusDecision


class TimeInStrategy(RemarksStrategy):
    """Time-in always writes remarks: LATE strictly after the cutoff, Ontime otherwise."""

    def __init__(self, late_after: time):
        self.late_after = late_after

    def decide(self, at: time) -> StatusDecision:
        if at > self.late_after:
            return StatusDecision(Remarks.LATE)
        return StatusDecision(Remarks.ONTIME)
