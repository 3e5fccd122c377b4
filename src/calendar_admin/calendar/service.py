from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from ..common.app_logger import get_logger
from ..core.enums import AccessLevel, ItemType
from ..core.exceptions import NotFoundError, ValidationError
from ..permissions.evaluator import PermissionEvaluator
from ..security.mass_assignment import strip_server_controlled
from ..users.model import User
from ..users.repository import UserRepository
from .model import CalendarItem, CalendarItemQuery, NewCalendarItem, Participant
from .repository import CalendarItemRepository
from .schemas import CalendarItemCreate, CalendarItemListQuery, CalendarItemUpdate, ParticipantIn

log = get_logger(__name__)


class CalendarService:
    """Use case: meetings and deadlines.

    Reads are narrowed by the caller's per-module scope; writes go through the
    configured write policy first, before the payload is even looked at.
    """

    def __init__(self, items: CalendarItemRepository, users: UserRepository, evaluator: PermissionEvaluator):
        self._items = items
        self._users = users
        self._evaluator = evaluator

    def list_items(self, user: User, params: Mapping[str, object]) -> Sequence[CalendarItem]:
        q = CalendarItemListQuery.model_validate(params)
        types = [q.type] if q.type is not None else list(ItemType)
        scopes = {t: self._evaluator.filter_for(user, t.module) for t in types}

        query = CalendarItemQuery(
            date_from=q.date_from,
            date_to=q.date_to,
            type=q.type,
            status=q.status,
            search=q.search,
            limit=q.limit,
        )
        items = self._items.list(query, scopes=scopes)
        log.info("Listed calendar items", extra={"context": {"user_id": user.id, "count": len(items)}})
        return items

    def get_item(self, user: User, item_id: int) -> CalendarItem:
        item = self._load(item_id)
        self._evaluator.require_access(
            user,
            item.module,
            item.created_by_id,
            AccessLevel.VIEW,
            is_participant=user.id in item.participant_ids,
        )
        return item

    def create_item(self, user: User, payload: object) -> CalendarItem:
        self._evaluator.require_write(user)

        data = CalendarItemCreate.model_validate(
            strip_server_controlled(payload, user_id=user.id, resource="calendar_item")
        )
        self._evaluator.require_write(user, data.type.module, user.id)
        participants = self._participants(data.participants or ())

        item_id = self._items.create(
            NewCalendarItem(
                type=data.type,
                title=data.title,
                description=data.description,
                start_at=data.start_at,
                end_at=data.end_at,
                all_day=data.all_day,
                status=data.status,
                location=data.location,
                created_by_id=user.id,
            ),
            participants,
        )
        log.info("Created calendar item", extra={"context": {"item_id": item_id, "user_id": user.id}})
        return self._load(item_id)

    def update_item(self, user: User, item_id: int, payload: object) -> CalendarItem:
        self._evaluator.require_write(user)

        existing = self._load(item_id)
        self._evaluator.require_write(user, existing.module, existing.created_by_id)

        data = CalendarItemUpdate.model_validate(
            strip_server_controlled(payload, user_id=user.id, resource="calendar_item")
        )
        changes = data.changes()
        if data.type is not None and data.type.module != existing.module:
            # Moving an item to another module needs write access there too.
            self._evaluator.require_write(user, data.type.module, existing.created_by_id)

        participants: Optional[list[Participant]] = None
        if "participants" in data.model_fields_set:
            participants = self._participants(data.participants or ())

        if not self._items.update(existing.id, changes, participants=participants):
            raise NotFoundError("Calendar item not found")

        log.info(
            "Updated calendar item",
            extra={"context": {"item_id": existing.id, "user_id": user.id, "fields": sorted(data.model_fields_set)}},
        )
        return self._load(existing.id)

    def delete_item(self, user: User, item_id: int) -> None:
        self._evaluator.require_write(user)

        existing = self._load(item_id)
        self._evaluator.require_write(user, existing.module, existing.created_by_id)

        if not self._items.delete(existing.id):
            raise NotFoundError("Calendar item not found")
        log.info("Deleted calendar item", extra={"context": {"item_id": existing.id, "user_id": user.id}})

    def _load(self, item_id: int) -> CalendarItem:
        item = self._items.get(int(item_id))
        if item is None:
            raise NotFoundError("Calendar item not found")
        return item

    def _participants(self, incoming: Iterable[ParticipantIn]) -> list[Participant]:
        participants = [Participant(user_id=p.user_id, role=p.role, rsvp=p.rsvp) for p in incoming]
        wanted = {p.user_id for p in participants}
        missing = sorted(wanted - self._users.existing_ids(wanted)) if wanted else []
        if missing:
            raise ValidationError("Unknown participant", details={"userIds": missing})
        return participants
