from __future__ import annotations

from datetime import date
from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import ReportRow
from .repository import ReportRepository


class MySQLReportRepository(ReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_rows(self, *, start_date: date, end_date: date) -> Sequence[ReportRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.user_id, u.username, u.position AS user_position,
                       a.position, a.`date` AS work_date, a.remarks
                FROM attendance a
                LEFT JOIN users u ON u.user_id = a.user_id
                WHERE a.`date` BETWEEN %s AND %s
                ORDER BY a.`date` ASC, u.username ASC
                """,
                (start_date, end_date),
            )
            return [
                ReportRow(
                    user_id=int(r["user_id"]),
                    username=r.get("username"),
                    user_position=r.get("user_position"),
                    position=r.get("position"),
                    work_date=r["work_date"],
                    remarks=r.get("remarks"),
                )
                for r in fetchall(cur)
            ]
