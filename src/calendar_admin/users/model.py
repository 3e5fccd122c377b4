from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object; no DB access here.
    """

    id: int
    name: str
    email: str
    password_hash: str
    role: Role
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class UserSummary:
    """What other records embed about a user (never the password hash)."""

    id: int
    name: str
    email: str = ""


def public_user(user: User) -> dict:
    return {"id": user.id, "name": user.name, "email": user.email, "role": user.role.value}


def summary_dict(summary: Optional[UserSummary], *, with_email: bool = True) -> Optional[dict]:
    if summary is None:
        return None
    out = {"id": summary.id, "name": summary.name}
    if with_email:
        out["email"] = summary.email
    return out
