from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.enums import Remarks, TimeSlot
from ..core.exceptions import ConcurrentUpdateError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time, run_with_retry
from .model import AttendanceLogRow, AttendanceRecord
from .repository import AttendanceRepository

# Column names are interpolated into SQL; only TimeSlot values are allowed.
_SLOT_COLUMNS = frozenset(s.value for s in TimeSlot)


def _column(slot: TimeSlot) -> str:
    if slot.value not in _SLOT_COLUMNS:
        raise ValueError(f"Unknown slot {slot!r}")
    return slot.value


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["date"],
        position=r.get("position"),
        am_time_in=normalize_mysql_time(r.get("am_time_in")),
        am_time_out=normalize_mysql_time(r.get("am_time_out")),
        pm_time_in=normalize_mysql_time(r.get("pm_time_in")),
        pm_time_out=normalize_mysql_time(r.get("pm_time_out")),
        remarks=Remarks.parse(r.get("remarks")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attendance_id, user_id, `date`, position,
                       am_time_in, am_time_out, pm_time_in, pm_time_out, remarks
                FROM attendance
                WHERE user_id=%s AND `date`=%s
                """,
                (user_id, work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

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
        column = _column(slot)

        def op() -> int:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    INSERT INTO attendance(user_id, position, `date`, {column}, remarks)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (user_id, position, work_date, at, remarks.value),
                )
                return int(cur.lastrowid)

        try:
            return run_with_retry(op)
        except IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise ConcurrentUpdateError(f"Attendance row for user {user_id} on {work_date} already exists") from e
            raise

    def fill_slot(
        self,
        *,
        attendance_id: int,
        slot: TimeSlot,
        at: time,
        remarks: Optional[Remarks],
        only_if_empty: bool,
    ) -> None:
        column = _column(slot)
        sets = [f"{column}=%s"]
        params: list = [at]
        if remarks is not None:
            sets.append("remarks=%s")
            params.append(remarks.value)
        where = "attendance_id=%s"
        params.append(attendance_id)
        if only_if_empty:
            where += f" AND {column} IS NULL"

        sql = f"UPDATE attendance SET {', '.join(sets)} WHERE {where}"

        def op() -> int:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(sql, tuple(params))
                return int(cur.rowcount)

        updated = run_with_retry(op)
        if only_if_empty and updated == 0:
            raise ConcurrentUpdateError(f"{slot.label} was filled by another request")

    def list_logs(
        self,
        *,
        start_date: date,
        end_date: date,
        user_id: Optional[int] = None,
        search_name: Optional[str] = None,
    ) -> Sequence[AttendanceLogRow]:
        where = ["a.`date` BETWEEN %s AND %s"]
        params: list = [start_date, end_date]
        if user_id is not None:
            where.append("a.user_id=%s")
            params.append(user_id)
        if search_name:
            where.append("u.username LIKE %s")
            params.append(f"%{search_name}%")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT a.user_id, u.username, a.position, a.`date`,
                       a.am_time_in, a.am_time_out, a.pm_time_in, a.pm_time_out, a.remarks
                FROM attendance a
                JOIN users u ON u.user_id = a.user_id
                WHERE {' AND '.join(where)}
                ORDER BY a.`date` DESC, a.attendance_id DESC
                """,
                tuple(params),
            )
            return [
                AttendanceLogRow(
                    user_id=int(r["user_id"]),
                    username=r["username"],
                    position=r.get("position"),
                    work_date=r["date"],
                    am_time_in=normalize_mysql_time(r.get("am_time_in")),
                    am_time_out=normalize_mysql_time(r.get("am_time_out")),
                    pm_time_in=normalize_mysql_time(r.get("pm_time_in")),
                    pm_time_out=normalize_mysql_time(r.get("pm_time_out")),
                    remarks=r.get("remarks"),
                )
                for r in fetchall(cur)
            ]
