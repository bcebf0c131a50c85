from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Callable, Dict, List, Optional, TypeVar

import mysql.connector
from mysql.connector import errorcode

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Lock wait timeout, deadlock, lost connection, server gone away.
TRANSIENT_ERRNOS = frozenset(
    {
        errorcode.ER_LOCK_WAIT_TIMEOUT,
        errorcode.ER_LOCK_DEADLOCK,
        errorcode.CR_SERVER_LOST,
        errorcode.CR_SERVER_GONE_ERROR,
        errorcode.CR_CONN_HOST_ERROR,
    }
)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def is_transient(exc: BaseException) -> bool:
    if isinstance(exc, (mysql.connector.errors.OperationalError, mysql.connector.errors.InterfaceError)):
        return True
    return isinstance(exc, mysql.connector.Error) and getattr(exc, "errno", None) in TRANSIENT_ERRNOS


def run_with_retry(operation: Callable[[], T], *, attempts: int = 2) -> T:
    """Run a write transaction, retrying once on a transient MySQL failure.

    Each attempt opens its own connection via db_cursor, so a failed attempt has
    already been rolled back before the retry.
    """

    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except mysql.connector.Error as exc:
            if attempt >= attempts or not is_transient(exc):
                raise
            logger.warning("Transient database error (attempt %s/%s): %s", attempt, attempts, exc)
    raise RuntimeError("unreachable")


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(float(parts[2])) if len(parts) >= 3 and parts[2] else 0
        return time(hour=hours, minute=minutes, second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
