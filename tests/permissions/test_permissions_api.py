from __future__ import annotations

from calendar_admin.core.enums import AccessLevel, Module
from conftest import login_as


def test_matrix_lists_users_with_permissions(as_admin, world):
    world.permissions.set(world.alice.id, Module.SCHEDULE, AccessLevel.VIEW, AccessLevel.NONE)

    users = as_admin.get("/api/admin/permissions").get_json()["users"]
    by_name = {u["name"]: u for u in users}

    assert [u["name"] for u in users] == ["Admin User", "Alice Johnson", "Bob Smith"]
    assert by_name["Alice Johnson"]["permissions"] == [
        {"module": "schedule", "myLevel": "VIEW", "allLevel": "NONE"}
    ]
    assert by_name["Bob Smith"]["permissions"] == []
    assert len(by_name["Admin User"]["permissions"]) == 3


def test_update_upserts_only_given_modules(as_admin, world):
    world.permissions.set(world.bob.id, Module.MEETINGS, AccessLevel.VIEW, AccessLevel.VIEW)

    resp = as_admin.put(
        "/api/admin/permissions",
        json={
            "userId": world.bob.id,
            "permissions": [
                {"module": "meetings", "myLevel": "EDIT", "allLevel": "NONE"},
                {"module": "deadlines", "myLevel": "VIEW", "allLevel": "VIEW"},
            ],
        },
    )

    assert resp.status_code == 200
    assert resp.get_json()["message"] == "Permissions updated successfully"
    assert world.permissions.get(user_id=world.bob.id, module=Module.MEETINGS).my_level == AccessLevel.EDIT
    assert world.permissions.get(user_id=world.bob.id, module=Module.DEADLINES).all_level == AccessLevel.VIEW
    assert world.permissions.get(user_id=world.bob.id, module=Module.SCHEDULE) is None


def test_update_validation(as_admin, world):
    bad_level = as_admin.put(
        "/api/admin/permissions",
        json={"userId": world.bob.id, "permissions": [{"module": "meetings", "myLevel": "ADMIN", "allLevel": "NONE"}]},
    )
    duplicate_module = as_admin.put(
        "/api/admin/permissions",
        json={
            "userId": world.bob.id,
            "permissions": [
                {"module": "meetings", "myLevel": "EDIT", "allLevel": "NONE"},
                {"module": "meetings", "myLevel": "VIEW", "allLevel": "NONE"},
            ],
        },
    )
    unknown_user = as_admin.put(
        "/api/admin/permissions",
        json={"userId": 999, "permissions": [{"module": "meetings", "myLevel": "EDIT", "allLevel": "NONE"}]},
    )

    assert bad_level.status_code == 400
    assert duplicate_module.status_code == 400
    assert unknown_user.status_code == 404


def test_non_admin_cannot_read_or_change_matrix(client, world):
    login_as(client, world.alice)

    assert client.get("/api/admin/permissions").status_code == 403
    resp = client.put(
        "/api/admin/permissions",
        json={"userId": world.alice.id, "permissions": [{"module": "meetings", "myLevel": "EDIT", "allLevel": "EDIT"}]},
    )
    assert resp.status_code == 403
    assert world.permissions.get(user_id=world.alice.id, module=Module.MEETINGS) is None


def test_anonymous_gets_401(client):
    assert client.get("/api/admin/permissions").status_code == 401
