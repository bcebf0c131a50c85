from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import CandidateSource
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Candidate, Fingerprint
from .repository import FingerprintRepository


class MySQLFingerprintRepository(FingerprintRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_candidates(self) -> Sequence[Candidate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT f.fingerprint_id, f.user_id, f.fingerprint_template, f.finger_index,
                       u.username, u.position
                FROM fingerprints f
                JOIN users u ON u.user_id = f.user_id
                ORDER BY f.fingerprint_id
                """
            )
            return [
                Candidate(
                    user_id=int(r["user_id"]),
                    username=r["username"],
                    position=r.get("position"),
                    template=r["fingerprint_template"],
                    source=CandidateSource.TABLE,
                    finger_index=int(r.get("finger_index") or 0),
                )
                for r in fetchall(cur)
            ]

    def list_for_user(self, user_id: int) -> Sequence[Fingerprint]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT fingerprint_id, user_id, fingerprint_template, finger_index,
                       quality, capture_count, registered_at
                FROM fingerprints
                WHERE user_id=%s
                ORDER BY finger_index
                """,
                (user_id,),
            )
            return [
                Fingerprint(
                    fingerprint_id=int(r["fingerprint_id"]),
                    user_id=int(r["user_id"]),
                    template=r["fingerprint_template"],
                    finger_index=int(r.get("finger_index") or 0),
                    quality=r.get("quality"),
                    capture_count=int(r.get("capture_count") or 1),
                    registered_at=r.get("registered_at"),
                )
                for r in fetchall(cur)
            ]

    def upsert(
        self,
        *,
        user_id: int,
        template: str,
        finger_index: int,
        quality: Optional[int],
        capture_count: int,
    ) -> int:
        # UNIQUE(user_id, finger_index)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO fingerprints(user_id, fingerprint_template, finger_index, quality, capture_count)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    fingerprint_template=VALUES(fingerprint_template),
                    quality=VALUES(quality),
                    capture_count=VALUES(capture_count),
                    fingerprint_id=LAST_INSERT_ID(fingerprint_id)
                """,
                (user_id, template, finger_index, quality, capture_count),
            )
            return int(cur.lastrowid)

    def delete_for_user(self, user_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM fingerprints WHERE user_id=%s", (user_id,))
            return int(cur.rowcount)
