from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import Remarks, TimeSlot
from .model import AttendanceLogRow, AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def insert_with_slot(
        self,
        *,
        user_id: int,
        work_date: date,
        position: Optional[str],
        slot: TimeSlot,
        at: time,
        remarks: Remarks,
    ) -> int:
        """Create today's row with one slot filled.

        Raises ConcurrentUpdateError when a row for (user_id, work_date) already exists.
        """

        raise NotImplementedError

    def fill_slot(
        self,
        *,
        attendance_id: int,
        slot: TimeSlot,
        at: time,
        remarks: Optional[Remarks],
        only_if_empty: bool,
    ) -> None:
        """Write one slot (and remarks when given).

        With only_if_empty, the write is conditional on the slot still being NULL
        and raises ConcurrentUpdateError when it is not.
        """

        raise NotImplementedError

    def list_logs(
        self,
        *,
        start_date: date,
        end_date: date,
        user_id: Optional[int] = None,
        search_name: Optional[str] = None,
    ) -> Sequence[AttendanceLogRow]:
        raise NotImplementedError
