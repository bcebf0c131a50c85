from __future__ import annotations

from dataclasses import dataclass, field

from ..core.constants import (
    AM_LATE_AFTER,
    AM_UNDERTIME_BEFORE,
    PM_LATE_AFTER,
    PM_OVERTIME_AFTER,
    PM_UNDERTIME_BEFORE,
)
from ..core.enums import TimeSlot
from .strategies.base import RemarksStrategy
from .strategies.time_in_strategy import TimeInStrategy
from .strategies.time_out_strategy import TimeOutStrategy


def _default_strategies() -> dict[TimeSlot, RemarksStrategy]:
    return {
        TimeSlot.AM_TIME_IN: TimeInStrategy(late_after=AM_LATE_AFTER),
        TimeSlot.AM_TIME_OUT: TimeOutStrategy(undertime_before=AM_UNDERTIME_BEFORE),
        TimeSlot.PM_TIME_IN: TimeInStrategy(late_after=PM_LATE_AFTER),
        TimeSlot.PM_TIME_OUT: TimeOutStrategy(undertime_before=PM_UNDERTIME_BEFORE, overtime_after=PM_OVERTIME_AFTER),
    }


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the remarks strategy for the slot being filled."""

    strategies: dict[TimeSlot, RemarksStrategy] = field(default_factory=_default_strategies)

    def for_slot(self, slot: TimeSlot) -> RemarksStrategy:
        return self.strategies[slot]
