from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..security.rate_limit import rate_limited
from ..security.session import login_required, require_user
from .schemas import serialize_item


def register(app: Flask, container: Container) -> None:
    service = container.calendar_service

    @app.get("/api/calendar/items", endpoint="calendar_items_list")
    @rate_limited("moderate")
    @login_required
    def list_items():
        items = service.list_items(require_user(), request.args.to_dict())
        return jsonify({"items": [serialize_item(i) for i in items]})

    @app.post("/api/calendar/items", endpoint="calendar_items_create")
    @rate_limited("moderate")
    @login_required
    def create_item():
        # The service applies the write policy before it looks at the body.
        item = service.create_item(require_user(), request.get_json(silent=True))
        return jsonify({"item": serialize_item(item)}), 201

    @app.get("/api/calendar/items/<int:item_id>", endpoint="calendar_items_get")
    @rate_limited("moderate")
    @login_required
    def get_item(item_id: int):
        return jsonify({"item": serialize_item(service.get_item(require_user(), item_id))})

    @app.patch("/api/calendar/items/<int:item_id>", endpoint="calendar_items_update")
    @rate_limited("moderate")
    @login_required
    def update_item(item_id: int):
        item = service.update_item(require_user(), item_id, request.get_json(silent=True))
        return jsonify({"item": serialize_item(item)})

    @app.delete("/api/calendar/items/<int:item_id>", endpoint="calendar_items_delete")
    @rate_limited("moderate")
    @login_required
    def delete_item(item_id: int):
        service.delete_item(require_user(), item_id)
        return jsonify({"success": True})
