from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class ReportRow:
    """Read-model: một dòng chấm công kèm thông tin user, phục vụ thống kê."""

    user_id: int
    username: Optional[str]
    user_position: Optional[str]
    position: Optional[str]
    work_date: date
    remarks: Optional[str]


@dataclass
class RemarksCounts:
    ontime: int = 0
    late: int = 0
    undertime: int = 0
    overtime: int = 0

    def add(self, category: Optional[str]) -> None:
        if category == "Ontime":
            self.ontime += 1
        elif category == "Late":
            self.late += 1
        elif category == "Undertime":
            self.undertime += 1
        elif category == "Overtime":
            self.overtime += 1

    def to_dict(self) -> dict:
        return {"ontime": self.ontime, "late": self.late, "undertime": self.undertime, "overtime": self.overtime}


@dataclass(frozen=True)
class DashboardSummary:
    day: date
    total_officials: int
    total_staff: int
    counts: RemarksCounts
    enrolled_users: int
    total_records: int

    def to_dict(self) -> dict:
        return {
            "success": True,
            "date": self.day.strftime("%Y-%m-%d"),
            "totalOfficials": self.total_officials,
            "totalStaff": self.total_staff,
            "ontime": self.counts.ontime,
            "late": self.counts.late,
            "undertime": self.counts.undertime,
            "overtime": self.counts.overtime,
            "enrolledUsers": self.enrolled_users,
            "totalRecords": self.total_records,
        }


@dataclass(frozen=True)
class PatternItem:
    pattern: str
    support: int

    def to_dict(self) -> dict:
        return {"pattern": self.pattern, "support": self.support}


@dataclass
class ChartData:
    labels: list[str] = field(default_factory=list)
    ontime: list[int] = field(default_factory=list)
    late: list[int] = field(default_factory=list)
    undertime: list[int] = field(default_factory=list)
    overtime: list[int] = field(default_factory=list)

    def append(self, label: str, counts: RemarksCounts) -> None:
        self.labels.append(label)
        self.ontime.append(counts.ontime)
        self.late.append(counts.late)
        self.undertime.append(counts.undertime)
        self.overtime.append(counts.overtime)

    def to_dict(self) -> dict:
        return {
            "labels": self.labels,
            "ontime": self.ontime,
            "late": self.late,
            "undertime": self.undertime,
            "overtime": self.overtime,
        }


@dataclass(frozen=True)
class ReportSummary:
    patterns: list[PatternItem]
    chart: ChartData

    def to_dict(self) -> dict:
        return {"patterns": [p.to_dict() for p in self.patterns], "chart": self.chart.to_dict()}


@dataclass(frozen=True)
class TrendPoint:
    day: date
    counts: RemarksCounts

    def to_dict(self) -> dict:
        return {"date": self.day.strftime("%Y-%m-%d"), **self.counts.to_dict()}
