from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..security.rate_limit import rate_limited
from ..security.session import login_required, require_user
from .schemas import serialize_entry


def register(app: Flask, container: Container) -> None:
    service = container.schedule_service

    @app.get("/api/schedule", endpoint="schedule_list")
    @rate_limited("moderate")
    @login_required
    def list_entries():
        entries = service.list_for_date(require_user(), request.args.to_dict())
        return jsonify({"entries": [serialize_entry(e) for e in entries]})

    @app.post("/api/schedule", endpoint="schedule_create")
    @rate_limited("moderate")
    @login_required
    def create_entry():
        entry = service.create_entry(require_user(), request.get_json(silent=True))
        return jsonify({"entry": serialize_entry(entry)}), 201

    @app.get("/api/schedule/<int:entry_id>", endpoint="schedule_get")
    @rate_limited("moderate")
    @login_required
    def get_entry(entry_id: int):
        return jsonify({"entry": serialize_entry(service.get_entry(require_user(), entry_id))})

    @app.patch("/api/schedule/<int:entry_id>", endpoint="schedule_update")
    @rate_limited("moderate")
    @login_required
    def update_entry(entry_id: int):
        entry = service.update_entry(require_user(), entry_id, request.get_json(silent=True))
        return jsonify({"entry": serialize_entry(entry)})

    @app.delete("/api/schedule/<int:entry_id>", endpoint="schedule_delete")
    @rate_limited("moderate")
    @login_required
    def delete_entry(entry_id: int):
        service.delete_entry(require_user(), entry_id)
        return jsonify({"success": True})
