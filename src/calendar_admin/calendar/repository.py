from __future__ import annotations

from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import ItemType
from ..permissions.evaluator import Scope
from .model import CalendarItem, CalendarItemQuery, NewCalendarItem, Participant


class CalendarItemRepository(Protocol):
    def get(self, item_id: int) -> Optional[CalendarItem]:
        """Item with creator and participants, or None."""

        raise NotImplementedError

    def list(self, query: CalendarItemQuery, *, scopes: Mapping[ItemType, Scope]) -> Sequence[CalendarItem]:
        """Items of the types present in ``scopes``, each type restricted by its scope.

        Ordered by start_at, title, id; at most ``query.limit`` rows.
        """

        raise NotImplementedError

    def create(self, item: NewCalendarItem, participants: Sequence[Participant]) -> int:
        raise NotImplementedError

    def update(
        self,
        item_id: int,
        changes: Mapping[str, object],
        *,
        participants: Optional[Sequence[Participant]] = None,
    ) -> bool:
        """Apply column changes and, when given, replace all participants atomically."""

        raise NotImplementedError

    def delete(self, item_id: int) -> bool:
        raise NotImplementedError
