from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Mapping, Optional, Sequence

from ..core.enums import AccessLevel, Module
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import Permission
from .repository import PermissionRepository


def _row_to_permission(row: dict) -> Permission:
    return Permission(
        user_id=int(row["user_id"]),
        module=Module(row["module"]),
        my_level=AccessLevel(row["my_level"]),
        all_level=AccessLevel(row["all_level"]),
    )


class MySQLPermissionRepository(PermissionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, user_id: int, module: Module) -> Optional[Permission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, module, my_level, all_level
                FROM user_permissions
                WHERE user_id=%s AND module=%s
                """,
                (int(user_id), module.value),
            )
            row = fetchone(cur)
            return _row_to_permission(row) if row else None

    def list_for_users(self, user_ids: Iterable[int]) -> Mapping[int, Sequence[Permission]]:
        ids = sorted({int(i) for i in user_ids})
        out: dict[int, list[Permission]] = defaultdict(list)
        if not ids:
            return out
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT user_id, module, my_level, all_level
                FROM user_permissions
                WHERE user_id IN ({placeholders(ids)})
                ORDER BY user_id, module
                """,
                tuple(ids),
            )
            for r in fetchall(cur):
                p = _row_to_permission(r)
                out[p.user_id].append(p)
        return out

    def upsert_many(self, *, user_id: int, permissions: Sequence[Permission]) -> Sequence[Permission]:
        with db_cursor(self._conn_factory) as (_, cur):
            for p in permissions:
                cur.execute(
                    """
                    INSERT INTO user_permissions(user_id, module, my_level, all_level)
                    VALUES(%s,%s,%s,%s)
                    ON DUPLICATE KEY UPDATE my_level=VALUES(my_level), all_level=VALUES(all_level)
                    """,
                    (int(user_id), p.module.value, p.my_level.value, p.all_level.value),
                )
        return list(permissions)
