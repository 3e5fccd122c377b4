from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConflictError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on error.

    Duplicate-key violations surface as ConflictError so callers never see a
    silent overwrite when two writers race past a pre-check.
    """
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as exc:
        conn.rollback()
        if getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY:
            raise ConflictError("Record already exists") from exc
        raise
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


def placeholders(values: Sequence[Any]) -> str:
    """'%s,%s,%s' for an IN (...) clause."""
    return ",".join(["%s"] * len(values))
