from __future__ import annotations

from typing import Sequence

from ..common.app_logger import get_logger
from ..core.constants import MAX_LIST_LIMIT
from ..core.exceptions import NotFoundError
from ..security import audit
from ..users.model import User, public_user
from ..users.repository import UserRepository
from .model import Permission, permission_dict
from .repository import PermissionRepository
from .schemas import PermissionUpdateRequest

log = get_logger(__name__)


class PermissionAdminService:
    """Use case: the admin permission matrix."""

    def __init__(self, users: UserRepository, permissions: PermissionRepository):
        self._users = users
        self._permissions = permissions

    def list_matrix(self, *, limit: int = MAX_LIST_LIMIT) -> list[dict]:
        users = self._users.list_all(limit=limit)
        by_user = self._permissions.list_for_users(u.id for u in users)
        out = []
        for u in users:
            row = public_user(u)
            row["permissions"] = [permission_dict(p) for p in by_user.get(u.id, ())]
            out.append(row)
        return out

    def update(self, admin: User, payload: dict) -> Sequence[Permission]:
        data = PermissionUpdateRequest.model_validate(payload)

        if self._users.get_by_id(data.user_id) is None:
            raise NotFoundError("User not found")

        permissions = [
            Permission(user_id=data.user_id, module=p.module, my_level=p.my_level, all_level=p.all_level)
            for p in data.permissions
        ]
        saved = self._permissions.upsert_many(user_id=data.user_id, permissions=permissions)

        audit.permission_changed(admin.id, data.user_id, [permission_dict(p) for p in saved])
        log.info(
            "Updated permissions",
            extra={"context": {"admin_user_id": admin.id, "target_user_id": data.user_id, "count": len(saved)}},
        )
        return saved
