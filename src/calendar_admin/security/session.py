"""Signed-cookie sessions and the route guards built on them."""

from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import current_app, g, request, session

from ..core.exceptions import AuthenticationError, AuthorizationError
from ..users.model import User
from . import audit

SESSION_USER_KEY = "user_id"
_UNSET = object()


def client_address() -> str:
    # Forwarding headers are only honoured through ProxyFix (TRUSTED_PROXY_COUNT).
    return request.remote_addr or "unknown"


def sign_in(user: User) -> None:
    session.clear()
    session[SESSION_USER_KEY] = user.id
    session.permanent = True
    g.current_user = user


def sign_out() -> None:
    session.clear()
    g.current_user = None


def current_user() -> Optional[User]:
    """User behind the session cookie, or None.

    A cookie naming a user that no longer exists is cleared.
    """
    cached = g.get("current_user", _UNSET)
    if cached is not _UNSET:
        return cached

    user = None
    user_id = session.get(SESSION_USER_KEY)
    if isinstance(user_id, int) and user_id > 0:
        container = current_app.extensions["calendar_admin"]
        user = container.user_service.get(user_id)
        if user is None:
            session.clear()
    elif user_id is not None:
        session.clear()

    g.current_user = user
    return user


def require_user() -> User:
    user = current_user()
    if user is None:
        audit.unauthorized_access(None, request.path, client_address())
        raise AuthenticationError("Authentication required")
    return user


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        require_user()
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        user = require_user()
        if not user.is_admin:
            audit.unauthorized_access(user.id, request.path, client_address())
            raise AuthorizationError("Forbidden: Admin access required")
        return view(*args, **kwargs)

    return wrapper
