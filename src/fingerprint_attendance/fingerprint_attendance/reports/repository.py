from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import ReportRow


class ReportRepository(Protocol):
    def list_rows(self, *, start_date: date, end_date: date) -> Sequence[ReportRow]:
        """Attendance rows in [start_date, end_date], ordered by date then username."""
        raise NotImplementedError
