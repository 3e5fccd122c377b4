from __future__ import annotations

from datetime import date

import pytest

from calendar_admin.core.enums import AccessLevel, Module
from calendar_admin.schedules.model import NewScheduleEntry
from conftest import login_as

DAY = date(2026, 3, 2)


def _entry(world, user, start=540, end=1020, *, day=DAY, created_by=None):
    return world.schedules.create(
        NewScheduleEntry(
            entry_date=day,
            start_time=start,
            end_time=end,
            user_id=user.id,
            created_by_id=(created_by or user).id,
        )
    )


def _payload(user, **overrides):
    body = {"date": "2026-03-02", "userId": user.id, "startTime": 540, "endTime": 1020}
    body.update(overrides)
    return body


def test_create_returns_entry_with_user_and_creator(as_admin, world):
    resp = as_admin.post("/api/schedule", json=_payload(world.alice, note="  front desk  "))

    assert resp.status_code == 201
    entry = resp.get_json()["entry"]
    assert entry["date"] == "2026-03-02"
    assert entry["note"] == "front desk"
    assert entry["user"]["id"] == world.alice.id
    assert entry["createdBy"] == {"id": world.admin.id, "name": "Admin User"}
    assert (entry["startLabel"], entry["endLabel"]) == ("09:00", "17:00")


@pytest.mark.parametrize("start, end", [(600, 600), (600, 540), (0, 0)])
def test_create_rejects_end_not_after_start(as_admin, world, start, end):
    resp = as_admin.post("/api/schedule", json=_payload(world.alice, startTime=start, endTime=end))
    assert resp.status_code == 400


@pytest.mark.parametrize("start, end", [(-1, 60), (0, 1441), (1440, 1440)])
def test_create_rejects_times_outside_the_day(as_admin, world, start, end):
    resp = as_admin.post("/api/schedule", json=_payload(world.alice, startTime=start, endTime=end))
    assert resp.status_code == 400


def test_full_day_shift_is_allowed(as_admin, world):
    resp = as_admin.post("/api/schedule", json=_payload(world.alice, startTime=0, endTime=1440))
    assert resp.status_code == 201


def test_update_checks_merged_times(as_admin, world):
    entry_id = _entry(world, world.alice, 540, 1020)

    assert as_admin.patch(f"/api/schedule/{entry_id}", json={"endTime": 540}).status_code == 400
    assert as_admin.patch(f"/api/schedule/{entry_id}", json={"startTime": 1020}).status_code == 400

    resp = as_admin.patch(f"/api/schedule/{entry_id}", json={"startTime": 600})
    assert resp.status_code == 200
    assert resp.get_json()["entry"]["startTime"] == 600


def test_second_entry_for_same_user_and_day_conflicts(as_admin, world):
    first = as_admin.post("/api/schedule", json=_payload(world.alice, note="first"))
    second = as_admin.post("/api/schedule", json=_payload(world.alice, startTime=600, endTime=700, note="second"))

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.get_json()["error"] == "ConflictError"

    listed = as_admin.get("/api/schedule?date=2026-03-02").get_json()["entries"]
    assert [(e["note"], e["startTime"]) for e in listed] == [("first", 540)]


def test_update_into_an_occupied_day_conflicts(as_admin, world):
    _entry(world, world.alice, day=date(2026, 3, 3))
    moving = _entry(world, world.alice)

    resp = as_admin.patch(f"/api/schedule/{moving}", json={"date": "2026-03-03"})
    assert resp.status_code == 409

    # same row keeps its own day
    assert as_admin.patch(f"/api/schedule/{moving}", json={"date": "2026-03-02", "note": "ok"}).status_code == 200


def test_list_requires_date(as_admin):
    resp = as_admin.get("/api/schedule")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Date parameter is required"
    assert as_admin.get("/api/schedule?date=03/02/2026").status_code == 400


def test_list_orders_by_start_time_then_user_name(as_admin, world):
    _entry(world, world.bob, 480, 900)
    _entry(world, world.alice, 480, 900)
    _entry(world, world.admin, 420, 900)

    entries = as_admin.get("/api/schedule?date=2026-03-02").get_json()["entries"]
    assert [e["user"]["name"] for e in entries] == ["Admin User", "Alice Johnson", "Bob Smith"]


def test_permission_update_then_own_entries_only(as_admin, client, world):
    _entry(world, world.alice, 540, 1020, created_by=world.admin)
    _entry(world, world.bob, 480, 960, created_by=world.admin)

    resp = as_admin.put(
        "/api/admin/permissions",
        json={
            "userId": world.alice.id,
            "permissions": [{"module": "schedule", "myLevel": "EDIT", "allLevel": "NONE"}],
        },
    )
    assert resp.status_code == 200

    login_as(client, world.alice)
    entries = client.get("/api/schedule?date=2026-03-02").get_json()["entries"]
    assert [e["userId"] for e in entries] == [world.alice.id]


def test_all_level_view_lists_everyone(client, world):
    _entry(world, world.alice)
    _entry(world, world.bob)
    world.permissions.set(world.alice.id, Module.SCHEDULE, AccessLevel.EDIT, AccessLevel.VIEW)

    login_as(client, world.alice)
    entries = client.get("/api/schedule?date=2026-03-02").get_json()["entries"]
    assert {e["userId"] for e in entries} == {world.alice.id, world.bob.id}


def test_non_admin_mutations_are_forbidden(client, world):
    own = _entry(world, world.alice)
    world.permissions.set(world.alice.id, Module.SCHEDULE, AccessLevel.EDIT, AccessLevel.EDIT)
    login_as(client, world.alice)

    responses = [
        client.post("/api/schedule", json=_payload(world.alice, date="2026-03-09")),
        client.patch(f"/api/schedule/{own}", json={"note": "mine"}),
        client.delete(f"/api/schedule/{own}"),
        client.delete("/api/schedule/999"),
    ]
    assert [r.status_code for r in responses] == [403, 403, 403, 403]


def test_get_one_and_delete(as_admin, client, world):
    entry_id = _entry(world, world.bob)

    assert as_admin.get(f"/api/schedule/{entry_id}").get_json()["entry"]["userId"] == world.bob.id
    assert as_admin.delete(f"/api/schedule/{entry_id}").get_json() == {"success": True}
    assert as_admin.get(f"/api/schedule/{entry_id}").status_code == 404


def test_shift_owner_can_view_entry_created_by_admin(client, world):
    entry_id = _entry(world, world.alice, created_by=world.admin)
    other = _entry(world, world.bob, created_by=world.admin)
    login_as(client, world.alice)

    assert client.get(f"/api/schedule/{entry_id}").status_code == 200
    assert client.get(f"/api/schedule/{other}").status_code == 403


def test_unknown_target_user_is_rejected(as_admin):
    resp = as_admin.post("/api/schedule", json={"date": "2026-03-02", "userId": 999, "startTime": 0, "endTime": 60})
    assert resp.status_code == 400
