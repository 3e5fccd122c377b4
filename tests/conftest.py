from __future__ import annotations

import logging
from dataclasses import dataclass

import pytest

from calendar_admin.container import Container, assemble
from calendar_admin.core.enums import AccessLevel, Module, Role, WritePolicy
from calendar_admin.common.app_logger import ROOT_LOGGER_NAME
from calendar_admin.main import create_app
from calendar_admin.security.rate_limit import FixedWindowRateLimiter, InMemoryRateLimitStore
from calendar_admin.users.model import User
from calendar_admin.users.service import AuthService
from fakes import InMemoryCalendarItems, InMemoryPermissions, InMemorySchedules, InMemoryUsers


@dataclass
class World:
    users: InMemoryUsers
    permissions: InMemoryPermissions
    items: InMemoryCalendarItems
    schedules: InMemorySchedules
    admin: User
    alice: User
    bob: User

    def container(self, *, write_policy: WritePolicy = WritePolicy.ADMIN_ONLY, rate_limited: bool = True) -> Container:
        limiter = FixedWindowRateLimiter(InMemoryRateLimitStore()) if rate_limited else None
        return assemble(
            users_repo=self.users,
            permissions_repo=self.permissions,
            calendar_repo=self.items,
            schedules_repo=self.schedules,
            write_policy=write_policy,
            rate_limiter=limiter,
            auth_service=AuthService(self.users, min_response_seconds=0),
        )


@pytest.fixture()
def world() -> World:
    users = InMemoryUsers()
    permissions = InMemoryPermissions()
    admin = users.add("Admin User", "admin@example.com", role=Role.ADMIN)
    alice = users.add("Alice Johnson", "alice@example.com")
    bob = users.add("Bob Smith", "bob@example.com")
    for module in Module:
        permissions.set(admin.id, module, AccessLevel.EDIT, AccessLevel.EDIT)
    return World(
        users=users,
        permissions=permissions,
        items=InMemoryCalendarItems(users),
        schedules=InMemorySchedules(users),
        admin=admin,
        alice=alice,
        bob=bob,
    )


@pytest.fixture()
def container(world: World) -> Container:
    return world.container()


@pytest.fixture()
def app(container: Container):
    app = create_app(container, settings_module="config.testing")
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


def login_as(client, user: User) -> None:
    """Put ``user`` into the signed session without going through /login."""
    with client.session_transaction() as s:
        s["user_id"] = user.id


@pytest.fixture()
def as_admin(client, world: World):
    login_as(client, world.admin)
    return client


@pytest.fixture()
def app_log(caplog):
    """caplog for the package logger, which does not propagate to root."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    propagate = logger.propagate
    logger.propagate = False
    logger.addHandler(caplog.handler)
    yield caplog
    logger.removeHandler(caplog.handler)
    logger.propagate = propagate
