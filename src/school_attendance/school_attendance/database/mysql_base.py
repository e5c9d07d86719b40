from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import DuplicateAttendanceError, StoreError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction.

    Commits when the block exits cleanly, rolls back otherwise. Driver errors
    leave as ``StoreError``; a unique-key violation leaves as
    ``DuplicateAttendanceError``.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        logger.exception("MySQL connection failed")
        raise StoreError("Database unavailable") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as exc:
        conn.rollback()
        if exc.errno == errorcode.ER_DUP_ENTRY:
            raise DuplicateAttendanceError() from exc
        raise StoreError(str(exc)) from exc
    except mysql.connector.Error as exc:
        conn.rollback()
        logger.exception("MySQL statement failed")
        raise StoreError(str(exc)) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
