from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..users.model import UserSummary


@dataclass(frozen=True)
class ScheduleEntry:
    """One user's shift on one day.

    Times are minutes from midnight; ``end_time`` is exclusive and may be 1440.
    """

    id: int
    entry_date: date
    start_time: int
    end_time: int
    user_id: int
    created_by_id: int
    note: Optional[str] = None
    user: Optional[UserSummary] = None
    created_by: Optional[UserSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewScheduleEntry:
    entry_date: date
    start_time: int
    end_time: int
    user_id: int
    created_by_id: int
    note: Optional[str] = None
