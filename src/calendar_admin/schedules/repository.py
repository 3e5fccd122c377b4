from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Protocol, Sequence

from ..permissions.evaluator import Scope
from .model import NewScheduleEntry, ScheduleEntry


class ScheduleRepository(Protocol):
    def get(self, entry_id: int) -> Optional[ScheduleEntry]:
        raise NotImplementedError

    def list_for_date(self, entry_date: date, *, scope: Scope, limit: int) -> Sequence[ScheduleEntry]:
        """Entries of one day visible under ``scope``, by start time then user name."""

        raise NotImplementedError

    def find_for_user_and_date(
        self, *, user_id: int, entry_date: date, exclude_id: Optional[int] = None
    ) -> Optional[ScheduleEntry]:
        raise NotImplementedError

    def create(self, entry: NewScheduleEntry) -> int:
        raise NotImplementedError

    def update(self, entry_id: int, changes: Mapping[str, object]) -> bool:
        raise NotImplementedError

    def delete(self, entry_id: int) -> bool:
        raise NotImplementedError
