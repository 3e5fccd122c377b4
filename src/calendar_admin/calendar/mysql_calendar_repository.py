from __future__ import annotations

from collections import defaultdict
from typing import Mapping, Optional, Sequence

from ..core.enums import ItemStatus, ItemType, ParticipantRole, Rsvp
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from ..permissions.evaluator import Scope
from ..users.model import UserSummary
from .model import CalendarItem, CalendarItemQuery, NewCalendarItem, Participant
from .repository import CalendarItemRepository

_SELECT = """
    SELECT ci.id, ci.type, ci.title, ci.description, ci.start_at, ci.end_at, ci.all_day,
           ci.status, ci.location, ci.created_by_id, ci.created_at, ci.updated_at,
           u.name AS creator_name, u.email AS creator_email
    FROM calendar_items ci
    JOIN users u ON u.id = ci.created_by_id
"""

# Column names accepted by update(); anything else is a programming error.
_UPDATABLE = {
    "type": "type",
    "title": "title",
    "description": "description",
    "start_at": "start_at",
    "end_at": "end_at",
    "all_day": "all_day",
    "status": "status",
    "location": "location",
}


def _db_value(value):
    if isinstance(value, (ItemType, ItemStatus)):
        return value.value
    if isinstance(value, bool):
        return int(value)
    return value


def _contains_pattern(text: str) -> str:
    """LIKE pattern matching ``text`` literally anywhere, case-insensitively."""
    escaped = text.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _scope_clause(scope: Scope) -> tuple[str, list[object]]:
    if scope.unrestricted:
        return "1=1", []
    if scope.include_participation:
        return (
            "(ci.created_by_id=%s OR EXISTS ("
            "SELECT 1 FROM calendar_item_participants sp WHERE sp.item_id = ci.id AND sp.user_id=%s))",
            [scope.user_id, scope.user_id],
        )
    return "ci.created_by_id=%s", [scope.user_id]


class MySQLCalendarItemRepository(CalendarItemRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_participants(self, cur, item_ids: Sequence[int]) -> dict[int, list[Participant]]:
        out: dict[int, list[Participant]] = defaultdict(list)
        if not item_ids:
            return out
        cur.execute(
            f"""
            SELECT p.item_id, p.user_id, p.role, p.rsvp, u.name, u.email
            FROM calendar_item_participants p
            JOIN users u ON u.id = p.user_id
            WHERE p.item_id IN ({placeholders(item_ids)})
            ORDER BY p.item_id, u.name, p.user_id
            """,
            tuple(item_ids),
        )
        for r in fetchall(cur):
            out[int(r["item_id"])].append(
                Participant(
                    user_id=int(r["user_id"]),
                    role=ParticipantRole(r["role"]),
                    rsvp=Rsvp(r["rsvp"]) if r.get("rsvp") else None,
                    user=UserSummary(id=int(r["user_id"]), name=r["name"], email=r["email"]),
                )
            )
        return out

    @staticmethod
    def _row_to_item(r: dict, participants: Sequence[Participant]) -> CalendarItem:
        return CalendarItem(
            id=int(r["id"]),
            type=ItemType(r["type"]),
            title=r["title"],
            description=r.get("description"),
            start_at=r["start_at"],
            end_at=r.get("end_at"),
            all_day=bool(r.get("all_day")),
            status=ItemStatus(r["status"]),
            location=r.get("location"),
            created_by_id=int(r["created_by_id"]),
            created_by=UserSummary(id=int(r["created_by_id"]), name=r["creator_name"], email=r["creator_email"]),
            participants=tuple(participants),
            created_at=r.get("created_at"),
            updated_at=r.get("updated_at"),
        )

    def get(self, item_id: int) -> Optional[CalendarItem]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE ci.id=%s", (int(item_id),))
            row = fetchone(cur)
            if not row:
                return None
            participants = self._load_participants(cur, [int(row["id"])])
            return self._row_to_item(row, participants.get(int(row["id"]), ()))

    def list(self, query: CalendarItemQuery, *, scopes: Mapping[ItemType, Scope]) -> Sequence[CalendarItem]:
        if not scopes:
            return []

        type_clauses: list[str] = []
        params: list[object] = []
        for item_type, scope in scopes.items():
            clause, scope_params = _scope_clause(scope)
            type_clauses.append(f"(ci.type=%s AND {clause})")
            params.append(item_type.value)
            params.extend(scope_params)

        clauses = ["(" + " OR ".join(type_clauses) + ")"]
        if query.date_from is not None:
            clauses.append("ci.start_at >= %s")
            params.append(query.date_from)
        if query.date_to is not None:
            clauses.append("ci.start_at <= %s")
            params.append(query.date_to)
        if query.status is not None:
            clauses.append("ci.status=%s")
            params.append(query.status.value)
        if query.search:
            clauses.append("LOWER(ci.title) LIKE %s ESCAPE '\\\\'")
            params.append(_contains_pattern(query.search))
        params.append(int(query.limit))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE {where} ORDER BY ci.start_at ASC, ci.title ASC, ci.id ASC LIMIT %s",
                tuple(params),
            )
            rows = fetchall(cur)
            participants = self._load_participants(cur, [int(r["id"]) for r in rows])
            return [self._row_to_item(r, participants.get(int(r["id"]), ())) for r in rows]

    @staticmethod
    def _insert_participants(cur, item_id: int, participants: Sequence[Participant]) -> None:
        for p in participants:
            cur.execute(
                "INSERT INTO calendar_item_participants(item_id, user_id, role, rsvp) VALUES(%s,%s,%s,%s)",
                (item_id, int(p.user_id), p.role.value, p.rsvp.value if p.rsvp else None),
            )

    def create(self, item: NewCalendarItem, participants: Sequence[Participant]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO calendar_items(type, title, description, start_at, end_at, all_day,
                                           status, location, created_by_id)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    item.type.value,
                    item.title,
                    item.description,
                    item.start_at,
                    item.end_at,
                    int(item.all_day),
                    item.status.value,
                    item.location,
                    int(item.created_by_id),
                ),
            )
            item_id = int(cur.lastrowid)
            self._insert_participants(cur, item_id, participants)
            return item_id

    def update(
        self,
        item_id: int,
        changes: Mapping[str, object],
        *,
        participants: Optional[Sequence[Participant]] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM calendar_items WHERE id=%s FOR UPDATE", (int(item_id),))
            if not fetchone(cur):
                return False

            if changes:
                sets = ", ".join(f"{_UPDATABLE[name]}=%s" for name in changes)
                cur.execute(
                    f"UPDATE calendar_items SET {sets} WHERE id=%s",
                    tuple(_db_value(v) for v in changes.values()) + (int(item_id),),
                )

            if participants is not None:
                cur.execute("DELETE FROM calendar_item_participants WHERE item_id=%s", (int(item_id),))
                self._insert_participants(cur, int(item_id), participants)
            return True

    def delete(self, item_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM calendar_items WHERE id=%s", (int(item_id),))
            return cur.rowcount > 0
