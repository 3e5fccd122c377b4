from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import AccessLevel, Module


@dataclass(frozen=True)
class Permission:
    """Per-user, per-module access levels.

    ``my_level`` covers the user's own records, ``all_level`` everybody else's.
    """

    user_id: int
    module: Module
    my_level: AccessLevel = AccessLevel.NONE
    all_level: AccessLevel = AccessLevel.NONE

    @classmethod
    def none(cls, user_id: int, module: Module) -> "Permission":
        return cls(user_id=user_id, module=module)


def permission_dict(p: Permission) -> dict:
    return {"module": p.module.value, "myLevel": p.my_level.value, "allLevel": p.all_level.value}
