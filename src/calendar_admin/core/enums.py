from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for route-level authorization."""

    ADMIN = "ADMIN"
    USER = "USER"


class Module(str, Enum):
    """Permission domains."""

    MEETINGS = "meetings"
    DEADLINES = "deadlines"
    SCHEDULE = "schedule"


class AccessLevel(str, Enum):
    NONE = "NONE"
    VIEW = "VIEW"
    EDIT = "EDIT"

    @property
    def rank(self) -> int:
        return _LEVEL_RANK[self]

    def allows(self, required: "AccessLevel") -> bool:
        return self.rank >= required.rank


_LEVEL_RANK = {AccessLevel.NONE: 0, AccessLevel.VIEW: 1, AccessLevel.EDIT: 2}


class ItemType(str, Enum):
    MEETING = "MEETING"
    DEADLINE = "DEADLINE"

    @property
    def module(self) -> Module:
        return Module.MEETINGS if self is ItemType.MEETING else Module.DEADLINES


class ItemStatus(str, Enum):
    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"
    DONE = "DONE"
    CANCELLED = "CANCELLED"


class ParticipantRole(str, Enum):
    OWNER = "OWNER"
    PARTICIPANT = "PARTICIPANT"
    RESPONSIBLE = "RESPONSIBLE"


class Rsvp(str, Enum):
    YES = "YES"
    NO = "NO"
    MAYBE = "MAYBE"


class WritePolicy(str, Enum):
    """How create/update/delete requests are authorized.

    ADMIN_ONLY ignores per-module levels for writes; MODULE_LEVEL consults the
    EDIT level of the record's module.
    """

    ADMIN_ONLY = "admin_only"
    MODULE_LEVEL = "module_level"
