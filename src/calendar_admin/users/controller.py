from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.app_logger import get_logger, mask
from ..container import Container
from ..security.rate_limit import rate_limited
from ..security.session import client_address, current_user, login_required, require_user, sign_in, sign_out
from .model import public_user

log = get_logger(__name__)


def _as_text(value: object) -> str:
    return value if isinstance(value, str) else ""


def register(app: Flask, container: Container) -> None:
    @app.post("/api/auth/login", endpoint="auth_login")
    @rate_limited("strict")
    def login():
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            payload = {}

        # Malformed input goes through the same hash-and-pad path as a wrong password.
        user = container.auth_service.authenticate(
            _as_text(payload.get("email")),
            _as_text(payload.get("password")),
            client_ip=client_address(),
        )
        sign_in(user)
        return jsonify({"user": public_user(user)})

    @app.post("/api/auth/signup", endpoint="auth_signup")
    @rate_limited("strict")
    def signup():
        payload = request.get_json(silent=True)
        user = container.auth_service.register(payload if isinstance(payload, dict) else {})
        sign_in(user)
        return jsonify({"user": public_user(user)}), 201

    @app.post("/api/auth/logout", endpoint="auth_logout")
    @rate_limited("moderate")
    def logout():
        user = current_user()
        sign_out()
        if user is not None:
            log.info("User logged out", extra={"context": {"user_id": user.id, "email": mask(user.email)}})
        return jsonify({"success": True})

    @app.get("/api/auth/me", endpoint="auth_me")
    @rate_limited("moderate")
    def me():
        user = current_user()
        return jsonify({"user": public_user(user) if user else None})

    @app.get("/api/users", endpoint="users_list")
    @rate_limited("moderate")
    @login_required
    def list_users():
        user = require_user()
        users = container.user_service.list_users()
        log.info("Listed users", extra={"context": {"user_id": user.id, "count": len(users)}})
        return jsonify({"users": [public_user(u) for u in users]})
