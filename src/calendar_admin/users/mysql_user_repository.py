from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import User
from .repository import UserRepository

_COLUMNS = "id, name, email, password_hash, role, created_at, updated_at"


def _row_to_user(row: dict) -> User:
    return User(
        id=int(row["id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE id=%s", (int(user_id),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def create_user(self, *, name: str, email: str, password_hash: str, role: Role) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO users(name, email, password_hash, role) VALUES(%s,%s,%s,%s)",
                (name, email, password_hash, role.value),
            )
            return int(cur.lastrowid)

    def list_all(self, *, limit: int) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY name ASC, id ASC LIMIT %s", (int(limit),))
            return [_row_to_user(r) for r in fetchall(cur)]

    def existing_ids(self, user_ids: Iterable[int]) -> set[int]:
        ids = sorted({int(i) for i in user_ids})
        if not ids:
            return set()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT id FROM users WHERE id IN ({placeholders(ids)})", tuple(ids))
            return {int(r["id"]) for r in fetchall(cur)}
