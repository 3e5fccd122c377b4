from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..common.datetime_utils import format_minutes, isoformat_utc
from ..core.constants import MAX_LIST_LIMIT, MINUTES_PER_DAY
from ..users.model import summary_dict
from .model import ScheduleEntry


def _camel(name: str) -> str:
    return "date" if name == "entry_date" else to_camel(name)


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid", alias_generator=_camel)


def _clean_note(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    return v.strip() or None


class ScheduleEntryCreate(_Strict):
    entry_date: date
    user_id: int = Field(..., gt=0)
    start_time: int = Field(..., ge=0, le=MINUTES_PER_DAY - 1)
    end_time: int = Field(..., ge=1, le=MINUTES_PER_DAY)
    note: Optional[str] = Field(None, max_length=1000)

    clean_note = field_validator("note")(_clean_note)

    @model_validator(mode="after")
    def end_after_start(self) -> "ScheduleEntryCreate":
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


_NOT_NULLABLE_UPDATE_FIELDS = ("entry_date", "user_id", "start_time", "end_time")


class ScheduleEntryUpdate(_Strict):
    """Partial update; the merged start/end pair is checked by the service."""

    entry_date: Optional[date] = None
    user_id: Optional[int] = Field(None, gt=0)
    start_time: Optional[int] = Field(None, ge=0, le=MINUTES_PER_DAY - 1)
    end_time: Optional[int] = Field(None, ge=1, le=MINUTES_PER_DAY)
    note: Optional[str] = Field(None, max_length=1000)

    clean_note = field_validator("note")(_clean_note)

    @model_validator(mode="after")
    def reject_nulls(self) -> "ScheduleEntryUpdate":
        for name in _NOT_NULLABLE_UPDATE_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{_camel(name)} cannot be null")
        return self

    def changes(self) -> dict:
        return {name: getattr(self, name) for name in self.model_fields_set}


class ScheduleListQuery(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    entry_date: date = Field(..., alias="date")
    limit: int = Field(MAX_LIST_LIMIT, ge=1, le=MAX_LIST_LIMIT)


def serialize_entry(entry: ScheduleEntry) -> dict:
    return {
        "id": entry.id,
        "date": entry.entry_date.isoformat(),
        "startTime": entry.start_time,
        "endTime": entry.end_time,
        "startLabel": format_minutes(entry.start_time),
        "endLabel": format_minutes(entry.end_time),
        "note": entry.note,
        "userId": entry.user_id,
        "user": summary_dict(entry.user),
        "createdBy": summary_dict(entry.created_by, with_email=False),
        "createdAt": isoformat_utc(entry.created_at),
        "updatedAt": isoformat_utc(entry.updated_at),
    }
