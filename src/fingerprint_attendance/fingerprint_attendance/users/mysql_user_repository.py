from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Gender, Position
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, username, password_hash, position, gender, fingerprint_template, created_at"


def _position(value: str) -> Position:
    # Dữ liệu cũ có thể lưu 'offical' (sai chính tả).
    value = (value or "").strip().lower()
    if value == "offical":
        return Position.OFFICIAL
    return Position(value)


def _row_to_user(row: dict) -> User:
    gender = row.get("gender")
    return User(
        user_id=int(row["user_id"]),
        username=row["username"],
        password_hash=row["password_hash"],
        position=_position(row["position"]),
        gender=Gender(gender) if gender else None,
        fingerprint_template=row.get("fingerprint_template") or None,
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE username=%s", (username,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY user_id")
            return [_row_to_user(r) for r in fetchall(cur)]

    def list_with_legacy_template(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM users
                WHERE fingerprint_template IS NOT NULL AND fingerprint_template <> ''
                ORDER BY user_id
                """
            )
            return [_row_to_user(r) for r in fetchall(cur)]

    def create_user(
        self,
        *,
        username: str,
        password_hash: str,
        position: Position,
        gender: Optional[Gender],
        fingerprint_template: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(username, password_hash, position, gender, fingerprint_template)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    username,
                    password_hash,
                    position.value,
                    gender.value if gender else None,
                    fingerprint_template,
                ),
            )
            return int(cur.lastrowid)

    def update_profile(
        self,
        user_id: int,
        *,
        username: Optional[str] = None,
        position: Optional[Position] = None,
        gender: Optional[Gender] = None,
        password_hash: Optional[str] = None,
    ) -> bool:
        sets: list[str] = []
        params: list = []
        if username is not None:
            sets.append("username=%s")
            params.append(username)
        if position is not None:
            sets.append("position=%s")
            params.append(position.value)
        if gender is not None:
            sets.append("gender=%s")
            params.append(gender.value)
        if password_hash is not None:
            sets.append("password_hash=%s")
            params.append(password_hash)
        if not sets:
            return False

        params.append(user_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE users SET {', '.join(sets)} WHERE user_id=%s", tuple(params))
            return cur.rowcount > 0

    def set_fingerprint_template(self, user_id: int, template: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET fingerprint_template=%s WHERE user_id=%s", (template, user_id))
            return cur.rowcount > 0

    def delete_by_id(self, user_id: int) -> bool:
        # attendance + fingerprints bị xóa theo ON DELETE CASCADE.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (user_id,))
            return cur.rowcount > 0
