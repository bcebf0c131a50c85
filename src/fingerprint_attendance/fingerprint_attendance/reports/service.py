from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Optional

from ..common.datetime_utils import current_month, days_in_month, month_bounds, parse_month
from ..core.constants import DEFAULT_PATTERN_LIMIT
from ..fingerprints.candidates import CandidateProvider
from .classifier import classify_remarks, normalize_position
from .model import ChartData, DashboardSummary, PatternItem, RemarksCounts, ReportSummary, TrendPoint
from .repository import ReportRepository


class ReportService:
    """Read-side rollups over attendance rows. No writes, no locking."""

    def __init__(self, reports: ReportRepository, candidates: CandidateProvider):
        self._reports = reports
        self._candidates = candidates

    def dashboard_summary(self, day: Optional[date] = None) -> DashboardSummary:
        day = day or date.today()
        rows = self._reports.list_rows(start_date=day, end_date=day)

        officials: set[int] = set()
        staff: set[int] = set()
        counts = RemarksCounts()
        for r in rows:
            position = normalize_position(r.position)
            if position == "official":
                officials.add(r.user_id)
            elif position == "staff":
                staff.add(r.user_id)
            counts.add(classify_remarks(r.remarks))

        return DashboardSummary(
            day=day,
            total_officials=len(officials),
            total_staff=len(staff),
            counts=counts,
            enrolled_users=self._candidates.enrolled_user_count(),
            total_records=len(rows),
        )

    def monthly_report(
        self,
        month: str,
        *,
        position: Optional[str] = None,
        search_name: Optional[str] = None,
        pattern_limit: int = DEFAULT_PATTERN_LIMIT,
    ) -> ReportSummary:
        """Zero-filled per-day chart for the whole month plus the top remarks patterns.

        With search_name, the chart keeps every row matching the position filter and
        the patterns are computed from that employee's rows only.
        """

        year, month_num = parse_month(month)
        start, end = month_bounds(year, month_num)
        rows = list(self._reports.list_rows(start_date=start, end_date=end))

        if position and position.strip():
            wanted = normalize_position(position)
            rows = [r for r in rows if normalize_position(r.user_position) == wanted]

        per_day: dict[date, RemarksCounts] = {}
        for r in rows:
            per_day.setdefault(r.work_date, RemarksCounts()).add(classify_remarks(r.remarks))

        chart = ChartData()
        for day_num in range(1, days_in_month(year, month_num) + 1):
            chart.append(str(day_num), per_day.get(date(year, month_num, day_num), RemarksCounts()))

        pattern_rows = rows
        needle = (search_name or "").strip().lower()
        if needle:
            pattern_rows = [r for r in rows if needle in (r.username or "").lower()]

        # Counter preserves first-seen order for equal counts.
        support = Counter(c for c in (classify_remarks(r.remarks) for r in pattern_rows) if c)
        patterns = [PatternItem(pattern=p, support=n) for p, n in support.most_common(pattern_limit)]

        return ReportSummary(patterns=patterns, chart=chart)

    def daily_trend(self, month: Optional[str] = None, employee: Optional[str] = None) -> list[TrendPoint]:
        """Per-day counts for days that have records only, ascending."""

        year, month_num = parse_month(month or current_month())
        start, end = month_bounds(year, month_num)
        rows = self._reports.list_rows(start_date=start, end_date=end)

        name = (employee or "").strip().lower()
        per_day: dict[date, RemarksCounts] = {}
        for r in rows:
            if name and (r.username or "").lower() != name:
                continue
            per_day.setdefault(r.work_date, RemarksCounts()).add(classify_remarks(r.remarks))

        return [TrendPoint(day=d, counts=per_day[d]) for d in sorted(per_day)]
