from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from ..core.enums import ItemStatus, ItemType, Module, ParticipantRole, Rsvp
from ..users.model import UserSummary


@dataclass(frozen=True)
class Participant:
    user_id: int
    role: ParticipantRole = ParticipantRole.PARTICIPANT
    rsvp: Optional[Rsvp] = None
    user: Optional[UserSummary] = None


@dataclass(frozen=True)
class CalendarItem:
    id: int
    type: ItemType
    title: str
    start_at: datetime
    created_by_id: int
    description: Optional[str] = None
    end_at: Optional[datetime] = None
    all_day: bool = False
    status: ItemStatus = ItemStatus.DRAFT
    location: Optional[str] = None
    created_by: Optional[UserSummary] = None
    participants: Tuple[Participant, ...] = field(default_factory=tuple)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def module(self) -> Module:
        return self.type.module

    @property
    def participant_ids(self) -> frozenset[int]:
        return frozenset(p.user_id for p in self.participants)


@dataclass(frozen=True)
class NewCalendarItem:
    type: ItemType
    title: str
    start_at: datetime
    created_by_id: int
    description: Optional[str] = None
    end_at: Optional[datetime] = None
    all_day: bool = False
    status: ItemStatus = ItemStatus.DRAFT
    location: Optional[str] = None


@dataclass(frozen=True)
class CalendarItemQuery:
    """Equality/range filters of a list request (scope is passed separately)."""

    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    type: Optional[ItemType] = None
    status: Optional[ItemStatus] = None
    search: Optional[str] = None
    limit: int = 1000
