from __future__ import annotations

from typing import Mapping, Sequence

from ..common.app_logger import get_logger
from ..core.enums import AccessLevel, Module
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..permissions.evaluator import PermissionEvaluator
from ..security.mass_assignment import strip_server_controlled
from ..users.model import User
from ..users.repository import UserRepository
from .model import NewScheduleEntry, ScheduleEntry
from .repository import ScheduleRepository
from .schemas import ScheduleEntryCreate, ScheduleEntryUpdate, ScheduleListQuery

log = get_logger(__name__)

DUPLICATE_ENTRY = "Schedule entry already exists for this user on this date"


class ScheduleService:
    """Use case: the daily shift schedule.

    An entry belongs to the user whose shift it is, so scoping and
    record-level checks use ``user_id`` rather than the creator.
    """

    def __init__(self, schedules: ScheduleRepository, users: UserRepository, evaluator: PermissionEvaluator):
        self._schedules = schedules
        self._users = users
        self._evaluator = evaluator

    def list_for_date(self, user: User, params: Mapping[str, object]) -> Sequence[ScheduleEntry]:
        if not params.get("date"):
            raise ValidationError("Date parameter is required")
        q = ScheduleListQuery.model_validate(params)

        scope = self._evaluator.filter_for(user, Module.SCHEDULE)
        entries = self._schedules.list_for_date(q.entry_date, scope=scope, limit=q.limit)
        log.info(
            "Listed schedule entries",
            extra={"context": {"user_id": user.id, "date": q.entry_date.isoformat(), "count": len(entries)}},
        )
        return entries

    def get_entry(self, user: User, entry_id: int) -> ScheduleEntry:
        entry = self._load(entry_id)
        self._evaluator.require_access(user, Module.SCHEDULE, entry.user_id, AccessLevel.VIEW)
        return entry

    def create_entry(self, user: User, payload: object) -> ScheduleEntry:
        self._evaluator.require_write(user)

        data = ScheduleEntryCreate.model_validate(
            strip_server_controlled(payload, user_id=user.id, resource="schedule_entry")
        )
        self._evaluator.require_write(user, Module.SCHEDULE, data.user_id)
        self._require_user(data.user_id)

        if self._schedules.find_for_user_and_date(user_id=data.user_id, entry_date=data.entry_date):
            raise ConflictError(DUPLICATE_ENTRY)

        try:
            entry_id = self._schedules.create(
                NewScheduleEntry(
                    entry_date=data.entry_date,
                    start_time=data.start_time,
                    end_time=data.end_time,
                    note=data.note,
                    user_id=data.user_id,
                    created_by_id=user.id,
                )
            )
        except ConflictError:
            # Lost a race against a concurrent insert for the same day.
            raise ConflictError(DUPLICATE_ENTRY)

        log.info("Created schedule entry", extra={"context": {"entry_id": entry_id, "user_id": user.id}})
        return self._load(entry_id)

    def update_entry(self, user: User, entry_id: int, payload: object) -> ScheduleEntry:
        self._evaluator.require_write(user)

        existing = self._load(entry_id)
        self._evaluator.require_write(user, Module.SCHEDULE, existing.user_id)

        data = ScheduleEntryUpdate.model_validate(
            strip_server_controlled(payload, user_id=user.id, resource="schedule_entry")
        )
        changes = data.changes()

        user_id = changes.get("user_id", existing.user_id)
        entry_date = changes.get("entry_date", existing.entry_date)
        if user_id != existing.user_id:
            self._evaluator.require_write(user, Module.SCHEDULE, user_id)
            self._require_user(user_id)

        if user_id != existing.user_id or entry_date != existing.entry_date:
            if self._schedules.find_for_user_and_date(user_id=user_id, entry_date=entry_date, exclude_id=existing.id):
                raise ConflictError(DUPLICATE_ENTRY)

        start_time = changes.get("start_time", existing.start_time)
        end_time = changes.get("end_time", existing.end_time)
        if end_time <= start_time:
            raise ValidationError("End time must be after start time")

        try:
            updated = self._schedules.update(existing.id, changes)
        except ConflictError:
            raise ConflictError(DUPLICATE_ENTRY)
        if not updated:
            raise NotFoundError("Schedule entry not found")

        log.info(
            "Updated schedule entry",
            extra={"context": {"entry_id": existing.id, "user_id": user.id, "fields": sorted(changes)}},
        )
        return self._load(existing.id)

    def delete_entry(self, user: User, entry_id: int) -> None:
        self._evaluator.require_write(user)

        existing = self._load(entry_id)
        self._evaluator.require_write(user, Module.SCHEDULE, existing.user_id)

        if not self._schedules.delete(existing.id):
            raise NotFoundError("Schedule entry not found")
        log.info("Deleted schedule entry", extra={"context": {"entry_id": existing.id, "user_id": user.id}})

    def _load(self, entry_id: int) -> ScheduleEntry:
        entry = self._schedules.get(int(entry_id))
        if entry is None:
            raise NotFoundError("Schedule entry not found")
        return entry

    def _require_user(self, user_id: int) -> None:
        if self._users.get_by_id(user_id) is None:
            raise ValidationError("Unknown user", details={"userId": user_id})
