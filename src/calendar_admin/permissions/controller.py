from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import read_json_body
from ..container import Container
from ..security.rate_limit import rate_limited
from ..security.session import admin_required, require_user
from .model import permission_dict


def register(app: Flask, container: Container) -> None:
    service = container.permission_admin_service

    @app.get("/api/admin/permissions", endpoint="admin_permissions_list")
    @rate_limited("moderate")
    @admin_required
    def list_permissions():
        return jsonify({"users": service.list_matrix()})

    @app.put("/api/admin/permissions", endpoint="admin_permissions_update")
    @rate_limited("moderate")
    @admin_required
    def update_permissions():
        saved = service.update(require_user(), read_json_body())
        return jsonify(
            {
                "message": "Permissions updated successfully",
                "permissions": [permission_dict(p) for p in saved],
            }
        )
