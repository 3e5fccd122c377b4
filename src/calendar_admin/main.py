from __future__ import annotations

import importlib
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from config import get_settings_module

from .common.app_logger import get_logger, setup_logging
from .common.http import register_error_handlers
from .core.constants import DEFAULT_SESSION_DAYS
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables

from .container import Container, build_container
from .calendar.controller import register as register_calendar
from .permissions.controller import register as register_permissions
from .schedules.controller import register as register_schedules
from .users.controller import register as register_users

MIN_PRODUCTION_SECRET_LENGTH = 32

log = get_logger(__name__)


def _check_secret(secret_key: str, environment: str) -> None:
    if environment != "production":
        return
    if not secret_key:
        raise RuntimeError("SECRET_KEY must be set in production")
    if len(secret_key) < MIN_PRODUCTION_SECRET_LENGTH:
        raise RuntimeError(f"SECRET_KEY must be at least {MIN_PRODUCTION_SECRET_LENGTH} characters in production")


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(getattr(settings, "LOG_LEVEL", None))

    environment = str(getattr(settings, "ENVIRONMENT", "development"))
    secret_key = str(getattr(settings, "SECRET_KEY", "") or "")
    _check_secret(secret_key, environment)

    app.config.update(
        SECRET_KEY=secret_key,
        DEBUG=bool(getattr(settings, "DEBUG", False)),
        TESTING=bool(getattr(settings, "TESTING", False)),
        ENVIRONMENT=environment,
        SESSION_COOKIE_NAME="calendar_session",
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        SESSION_COOKIE_SECURE=bool(getattr(settings, "SESSION_COOKIE_SECURE", environment == "production")),
        PERMANENT_SESSION_LIFETIME=timedelta(days=DEFAULT_SESSION_DAYS),
    )

    trusted_proxies = int(getattr(settings, "TRUSTED_PROXY_COUNT", 0) or 0)
    if trusted_proxies > 0:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=trusted_proxies, x_proto=trusted_proxies)

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        log.info(
            "Starting calendar admin",
            extra={
                "context": {
                    "settings": settings_module,
                    "db": f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
                }
            },
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            log.info("Schema ready", extra={"context": {"tables": len(list_tables(db_config))}})
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_users(db_config)

        container = build_container(db_config=db_config, settings=settings)

    app.extensions["calendar_admin"] = container
    register_error_handlers(app)

    register_users(app, container)
    register_permissions(app, container)
    register_calendar(app, container)
    register_schedules(app, container)

    return app
