from __future__ import annotations

import re
from pathlib import Path

from werkzeug.security import generate_password_hash

from ..common.app_logger import get_logger
from ..core.enums import AccessLevel, Module, Role
from .connection import DBConfig, DatabaseConnection
from .mysql_base import db_cursor, fetchone

log = get_logger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"

DEMO_PASSWORD = "Password123!"
DEMO_ADMIN = ("Admin User", "admin@example.com")
DEMO_USERS = (
    ("Alice Johnson", "alice@example.com"),
    ("Bob Smith", "bob@example.com"),
    ("Carol Williams", "carol@example.com"),
    ("David Brown", "david@example.com"),
    ("Emma Davis", "emma@example.com"),
)


_NOISE = re.compile(r"(?im)^\s*(?:--.*|CREATE\s+DATABASE\b.*?;|USE\b.*?;)\s*$")
# A statement is a run of quoted strings or anything but ';'.
_STATEMENT = re.compile(r"""(?:'(?:\\.|[^'\\])*'|"(?:\\.|[^"\\])*"|[^;'"])+""")


def split_statements(sql: str) -> list[str]:
    """Break schema.sql into executable statements.

    Comment lines and any CREATE DATABASE / USE lines are dropped so the file
    works against whatever database DB_CONFIG names.
    """
    sql = _NOISE.sub("", sql)
    return [m.group(0).strip() for m in _STATEMENT.finditer(sql) if m.group(0).strip()]


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    name = conn_factory.config.database
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    conn_factory = DatabaseConnection(DBConfig.from_mapping(db_config))
    ensure_database_exists(conn_factory)

    statements = split_statements(Path(schema_path).read_text(encoding="utf-8"))
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        for stmt in statements:
            cur.execute(stmt)
    log.info("Schema applied", extra={"context": {"database": conn_factory.config.database}})


def list_tables(db_config: dict) -> list[str]:
    conn_factory = DatabaseConnection(DBConfig.from_mapping(db_config))
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]


def _upsert_user(cur, *, name: str, email: str, password: str, role: Role) -> int:
    password_hash = generate_password_hash(password)
    cur.execute("SELECT id FROM users WHERE email=%s", (email,))
    existing = fetchone(cur)
    if existing:
        cur.execute(
            "UPDATE users SET name=%s, password_hash=%s, role=%s WHERE email=%s",
            (name, password_hash, role.value, email),
        )
        return int(existing["id"])

    cur.execute(
        "INSERT INTO users (name, email, password_hash, role) VALUES (%s, %s, %s, %s)",
        (name, email, password_hash, role.value),
    )
    return int(cur.lastrowid)


def _grant(cur, *, user_id: int, my_level: AccessLevel, all_level: AccessLevel) -> None:
    for module in Module:
        cur.execute(
            """
            INSERT INTO user_permissions (user_id, module, my_level, all_level)
            VALUES (%s, %s, %s, %s)
            ON DUPLICATE KEY UPDATE my_level=VALUES(my_level), all_level=VALUES(all_level)
            """,
            (user_id, module.value, my_level.value, all_level.value),
        )


def ensure_superadmin(db_config: dict, *, name: str, email: str, password: str) -> bool:
    """Create one admin with EDIT/EDIT on every module.

    Returns False when a user with that email already exists (left untouched).
    """
    conn_factory = DatabaseConnection(DBConfig.from_mapping(db_config))
    with db_cursor(conn_factory) as (_, cur):
        cur.execute("SELECT id FROM users WHERE email=%s", (email,))
        if fetchone(cur):
            return False
        user_id = _upsert_user(cur, name=name, email=email, password=password, role=Role.ADMIN)
        _grant(cur, user_id=user_id, my_level=AccessLevel.EDIT, all_level=AccessLevel.EDIT)
    log.info("Superadmin created", extra={"context": {"user_id": user_id}})
    return True


def ensure_demo_users(db_config: dict) -> None:
    conn_factory = DatabaseConnection(DBConfig.from_mapping(db_config))
    with db_cursor(conn_factory) as (_, cur):
        admin_name, admin_email = DEMO_ADMIN
        admin_id = _upsert_user(cur, name=admin_name, email=admin_email, password=DEMO_PASSWORD, role=Role.ADMIN)
        _grant(cur, user_id=admin_id, my_level=AccessLevel.EDIT, all_level=AccessLevel.EDIT)

        for name, email in DEMO_USERS:
            user_id = _upsert_user(cur, name=name, email=email, password=DEMO_PASSWORD, role=Role.USER)
            _grant(cur, user_id=user_id, my_level=AccessLevel.EDIT, all_level=AccessLevel.NONE)
    log.info("Demo users ready", extra={"context": {"count": len(DEMO_USERS) + 1}})
