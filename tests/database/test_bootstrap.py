from calendar_admin.database.bootstrap import SCHEMA_PATH, split_statements


def test_split_statements_drops_comments_and_database_selection():
    sql = """
    -- header
    CREATE DATABASE IF NOT EXISTS other;
    USE other;
    CREATE TABLE a (id INT);
    INSERT INTO a (note) VALUES ('x; y'), ("it\\'s");
    """

    assert split_statements(sql) == [
        "CREATE TABLE a (id INT)",
        "INSERT INTO a (note) VALUES ('x; y'), (\"it\\'s\")",
    ]


def test_bundled_schema_creates_every_table():
    statements = split_statements(SCHEMA_PATH.read_text(encoding="utf-8"))
    created = [s.split("(")[0].split()[-1].strip("`") for s in statements if s.upper().startswith("CREATE TABLE")]

    assert set(created) >= {"users", "user_permissions", "calendar_items", "calendar_item_participants", "schedule_entries"}
