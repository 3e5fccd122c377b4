"""Security event logging (failed logins, denied access, throttling, grants)."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from ..common.app_logger import get_logger, mask

log = get_logger("security")


def failed_login(email: str, ip: str, reason: str) -> None:
    log.warning(
        "Security: Failed login attempt",
        extra={"context": {"event": "failed_login", "email": mask(email), "ip": ip, "reason": reason}},
    )


def unauthorized_access(user_id: Optional[int], resource: str, ip: str = "unknown") -> None:
    log.warning(
        "Security: Unauthorized access attempt",
        extra={
            "context": {
                "event": "unauthorized_access",
                "user_id": user_id if user_id is not None else "anonymous",
                "resource": resource,
                "ip": ip,
            }
        },
    )


def rate_limit_exceeded(ip: str, endpoint: str, tier: str) -> None:
    log.warning(
        "Security: Rate limit exceeded",
        extra={"context": {"event": "rate_limit_exceeded", "ip": ip, "endpoint": endpoint, "tier": tier}},
    )


def permission_changed(admin_user_id: int, target_user_id: int, changes: Any) -> None:
    log.info(
        "Security: Permissions changed",
        extra={
            "context": {
                "event": "permission_changed",
                "admin_user_id": admin_user_id,
                "target_user_id": target_user_id,
                "changes": changes,
            }
        },
    )


def mass_assignment_attempt(user_id: int, resource: str, fields: Iterable[str]) -> None:
    log.warning(
        "Security: Ignored server-controlled fields",
        extra={
            "context": {
                "event": "mass_assignment",
                "user_id": user_id,
                "resource": resource,
                "fields": sorted(fields),
            }
        },
    )
