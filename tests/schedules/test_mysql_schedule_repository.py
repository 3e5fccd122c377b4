from __future__ import annotations

from datetime import date

import pytest

from calendar_admin.core.enums import Module
from calendar_admin.permissions.evaluator import Scope
from calendar_admin.schedules.mysql_schedule_repository import MySQLScheduleRepository
from fakes import RecordingConnectionFactory

DAY = date(2026, 3, 2)
ORDER_AND_LIMIT = "ORDER BY se.start_time ASC, u.name ASC, se.id ASC LIMIT %s"


def _where(sql: str) -> str:
    return sql.split(" WHERE ", 1)[1]


def test_restricted_scope_lists_only_the_users_own_entries():
    conn = RecordingConnectionFactory()

    MySQLScheduleRepository(conn).list_for_date(DAY, scope=Scope(Module.SCHEDULE, 3, unrestricted=False), limit=20)

    (sql, params), = conn.statements
    assert _where(sql) == f"se.entry_date=%s AND se.user_id=%s {ORDER_AND_LIMIT}"
    assert params == (DAY, 3, 20)


def test_unrestricted_scope_lists_every_user():
    conn = RecordingConnectionFactory()

    MySQLScheduleRepository(conn).list_for_date(DAY, scope=Scope(Module.SCHEDULE, 3, unrestricted=True), limit=20)

    (sql, params), = conn.statements
    assert _where(sql) == f"se.entry_date=%s {ORDER_AND_LIMIT}"
    assert params == (DAY, 20)


def test_uniqueness_lookup_can_exclude_the_entry_being_edited():
    conn = RecordingConnectionFactory()

    assert MySQLScheduleRepository(conn).find_for_user_and_date(user_id=4, entry_date=DAY, exclude_id=9) is None

    (sql, params), = conn.statements
    assert _where(sql) == "se.user_id=%s AND se.entry_date=%s AND se.id<>%s LIMIT 1"
    assert params == (4, DAY, 9)


def test_rows_are_mapped_with_user_and_creator():
    row = {
        "id": 1,
        "entry_date": DAY,
        "start_time": 540,
        "end_time": 1020,
        "note": None,
        "user_id": 3,
        "created_by_id": 1,
        "created_at": None,
        "updated_at": None,
        "user_name": "Alice Johnson",
        "user_email": "alice@example.com",
        "creator_name": "Admin User",
    }
    conn = RecordingConnectionFactory(results=[[row]])

    entry = MySQLScheduleRepository(conn).get(1)

    assert (entry.start_time, entry.end_time) == (540, 1020)
    assert entry.user.name == "Alice Johnson"
    assert entry.created_by.name == "Admin User"


def test_update_only_touches_known_columns():
    conn = RecordingConnectionFactory()
    repo = MySQLScheduleRepository(conn)

    with pytest.raises(ValueError):
        repo.update(1, {"created_by_id": 2})
    assert conn.statements == []
