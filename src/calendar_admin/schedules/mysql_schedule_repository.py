from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..permissions.evaluator import Scope
from ..users.model import UserSummary
from .model import NewScheduleEntry, ScheduleEntry
from .repository import ScheduleRepository

_SELECT = """
    SELECT se.id, se.entry_date, se.start_time, se.end_time, se.note,
           se.user_id, se.created_by_id, se.created_at, se.updated_at,
           u.name AS user_name, u.email AS user_email,
           c.name AS creator_name
    FROM schedule_entries se
    JOIN users u ON u.id = se.user_id
    JOIN users c ON c.id = se.created_by_id
"""

_UPDATABLE = ("entry_date", "user_id", "start_time", "end_time", "note")


def _row_to_entry(r: dict) -> ScheduleEntry:
    return ScheduleEntry(
        id=int(r["id"]),
        entry_date=r["entry_date"],
        start_time=int(r["start_time"]),
        end_time=int(r["end_time"]),
        note=r.get("note"),
        user_id=int(r["user_id"]),
        created_by_id=int(r["created_by_id"]),
        user=UserSummary(id=int(r["user_id"]), name=r["user_name"], email=r["user_email"]),
        created_by=UserSummary(id=int(r["created_by_id"]), name=r["creator_name"]),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, entry_id: int) -> Optional[ScheduleEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE se.id=%s", (int(entry_id),))
            r = fetchone(cur)
            return _row_to_entry(r) if r else None

    def list_for_date(self, entry_date: date, *, scope: Scope, limit: int) -> Sequence[ScheduleEntry]:
        clauses = ["se.entry_date=%s"]
        params: list[object] = [entry_date]
        if not scope.unrestricted:
            clauses.append("se.user_id=%s")
            params.append(int(scope.user_id))
        params.append(int(limit))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE {where} ORDER BY se.start_time ASC, u.name ASC, se.id ASC LIMIT %s",
                tuple(params),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]

    def find_for_user_and_date(
        self, *, user_id: int, entry_date: date, exclude_id: Optional[int] = None
    ) -> Optional[ScheduleEntry]:
        clauses = ["se.user_id=%s", "se.entry_date=%s"]
        params: list[object] = [int(user_id), entry_date]
        if exclude_id is not None:
            clauses.append("se.id<>%s")
            params.append(int(exclude_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE " + " AND ".join(clauses) + " LIMIT 1", tuple(params))
            r = fetchone(cur)
            return _row_to_entry(r) if r else None

    def create(self, entry: NewScheduleEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedule_entries(entry_date, start_time, end_time, note, user_id, created_by_id)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.entry_date,
                    int(entry.start_time),
                    int(entry.end_time),
                    entry.note,
                    int(entry.user_id),
                    int(entry.created_by_id),
                ),
            )
            return int(cur.lastrowid)

    def update(self, entry_id: int, changes: Mapping[str, object]) -> bool:
        unknown = set(changes) - set(_UPDATABLE)
        if unknown:
            raise ValueError(f"Not updatable: {sorted(unknown)}")

        with db_cursor(self._conn_factory) as (_, cur):
            if not changes:
                cur.execute("SELECT id FROM schedule_entries WHERE id=%s", (int(entry_id),))
                return fetchone(cur) is not None

            sets = ", ".join(f"{name}=%s" for name in changes)
            cur.execute(
                f"UPDATE schedule_entries SET {sets} WHERE id=%s",
                tuple(changes.values()) + (int(entry_id),),
            )
            if cur.rowcount > 0:
                return True
            # MySQL reports 0 affected rows when nothing actually changed.
            cur.execute("SELECT id FROM schedule_entries WHERE id=%s", (int(entry_id),))
            return fetchone(cur) is not None

    def delete(self, entry_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM schedule_entries WHERE id=%s", (int(entry_id),))
            return cur.rowcount > 0
