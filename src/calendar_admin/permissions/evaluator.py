"""Turns permission rows into list scopes and per-record decisions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from ..core.enums import AccessLevel, Module, WritePolicy
from ..core.exceptions import AuthorizationError
from ..users.model import User
from .model import Permission
from .repository import PermissionRepository

# Participation only exists for calendar items.
_PARTICIPATION_MODULES = frozenset({Module.MEETINGS, Module.DEADLINES})


@dataclass(frozen=True)
class Scope:
    """Restriction applied to a list query for one module.

    Unrestricted scopes match every row; otherwise only rows the user owns
    (or participates in, where participation applies).
    """

    module: Module
    user_id: int
    unrestricted: bool
    include_participation: bool = False

    def permits(self, owner_id: int, participant_ids: Iterable[int] = ()) -> bool:
        if self.unrestricted or owner_id == self.user_id:
            return True
        return self.include_participation and self.user_id in set(participant_ids)


class PermissionEvaluator:
    def __init__(self, permissions: PermissionRepository, *, write_policy: WritePolicy = WritePolicy.ADMIN_ONLY):
        self._permissions = permissions
        self._write_policy = write_policy

    def permission_for(self, user: User, module: Module) -> Permission:
        """Stored row, or NONE/NONE when the user has no row for the module."""
        return self._permissions.get(user_id=user.id, module=module) or Permission.none(user.id, module)

    def filter_for(self, user: User, module: Module) -> Scope:
        permission = self.permission_for(user, module)
        return Scope(
            module=module,
            user_id=user.id,
            unrestricted=permission.all_level.allows(AccessLevel.VIEW),
            include_participation=module in _PARTICIPATION_MODULES,
        )

    def can_access(
        self,
        user: User,
        module: Module,
        owner_id: int,
        required: AccessLevel = AccessLevel.VIEW,
        *,
        is_participant: bool = False,
    ) -> bool:
        if user.id == owner_id:
            return True
        if required == AccessLevel.VIEW and is_participant and module in _PARTICIPATION_MODULES:
            return True
        return self.permission_for(user, module).all_level.allows(required)

    def require_access(
        self,
        user: User,
        module: Module,
        owner_id: int,
        required: AccessLevel = AccessLevel.VIEW,
        *,
        is_participant: bool = False,
    ) -> None:
        if not self.can_access(user, module, owner_id, required, is_participant=is_participant):
            raise AuthorizationError("You do not have permission to access this record")

    def can_write(self, user: User, module: Optional[Module] = None, owner_id: Optional[int] = None) -> bool:
        """Write authorization under the configured policy.

        Without a module only the role gate is evaluated; MODULE_LEVEL defers
        to the record-level check that follows once the record is known.
        """
        if user.is_admin:
            return True
        if self._write_policy == WritePolicy.ADMIN_ONLY:
            return False
        if module is None:
            return True

        permission = self.permission_for(user, module)
        level = permission.my_level if owner_id == user.id else permission.all_level
        return level.allows(AccessLevel.EDIT)

    def require_write(self, user: User, module: Optional[Module] = None, owner_id: Optional[int] = None) -> None:
        if not self.can_write(user, module, owner_id):
            if self._write_policy == WritePolicy.ADMIN_ONLY:
                raise AuthorizationError("Forbidden: Admin access required")
            raise AuthorizationError("You do not have edit permission for this record")
