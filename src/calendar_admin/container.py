from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .calendar.mysql_calendar_repository import MySQLCalendarItemRepository
from .calendar.repository import CalendarItemRepository
from .calendar.service import CalendarService
from .core.enums import WritePolicy
from .database.connection import DBConfig, DatabaseConnection
from .permissions.evaluator import PermissionEvaluator
from .permissions.mysql_permission_repository import MySQLPermissionRepository
from .permissions.repository import PermissionRepository
from .permissions.service import PermissionAdminService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository
from .schedules.service import ScheduleService
from .security.rate_limit import FixedWindowRateLimiter, build_store
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    permissions_repo: PermissionRepository
    calendar_repo: CalendarItemRepository
    schedules_repo: ScheduleRepository

    evaluator: PermissionEvaluator
    auth_service: AuthService
    user_service: UserService
    permission_admin_service: PermissionAdminService
    calendar_service: CalendarService
    schedule_service: ScheduleService

    # None disables throttling.
    rate_limiter: Optional[FixedWindowRateLimiter] = None


def assemble(
    *,
    users_repo: UserRepository,
    permissions_repo: PermissionRepository,
    calendar_repo: CalendarItemRepository,
    schedules_repo: ScheduleRepository,
    write_policy: WritePolicy = WritePolicy.ADMIN_ONLY,
    rate_limiter: Optional[FixedWindowRateLimiter] = None,
    auth_service: Optional[AuthService] = None,
) -> Container:
    """Wire services on top of any repository implementations."""
    evaluator = PermissionEvaluator(permissions_repo, write_policy=write_policy)
    return Container(
        users_repo=users_repo,
        permissions_repo=permissions_repo,
        calendar_repo=calendar_repo,
        schedules_repo=schedules_repo,
        evaluator=evaluator,
        auth_service=auth_service or AuthService(users_repo),
        user_service=UserService(users_repo),
        permission_admin_service=PermissionAdminService(users_repo, permissions_repo),
        calendar_service=CalendarService(calendar_repo, users_repo, evaluator),
        schedule_service=ScheduleService(schedules_repo, users_repo, evaluator),
        rate_limiter=rate_limiter,
    )


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    rate_limiter = None
    if bool(getattr(settings, "RATE_LIMIT_ENABLED", True)):
        rate_limiter = FixedWindowRateLimiter(build_store(getattr(settings, "RATE_LIMIT_STORAGE_URL", None)))

    return assemble(
        users_repo=MySQLUserRepository(conn),
        permissions_repo=MySQLPermissionRepository(conn),
        calendar_repo=MySQLCalendarItemRepository(conn),
        schedules_repo=MySQLScheduleRepository(conn),
        write_policy=WritePolicy(getattr(settings, "WRITE_POLICY", WritePolicy.ADMIN_ONLY.value)),
        rate_limiter=rate_limiter,
    )
