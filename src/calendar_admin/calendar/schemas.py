"""Calendar request schemas and response shaping."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..common.datetime_utils import isoformat_utc, to_naive_utc
from ..core.constants import MAX_LIST_LIMIT
from ..core.enums import ItemStatus, ItemType, ParticipantRole, Rsvp
from ..users.model import summary_dict
from .model import CalendarItem


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid", alias_generator=to_camel)


class ParticipantIn(_Strict):
    user_id: int = Field(..., gt=0)
    role: ParticipantRole = ParticipantRole.PARTICIPANT
    rsvp: Optional[Rsvp] = None


def _unique_participants(v: Optional[List[ParticipantIn]]) -> Optional[List[ParticipantIn]]:
    if v is None:
        return v
    ids = [p.user_id for p in v]
    if len(ids) != len(set(ids)):
        raise ValueError("A user may appear only once among participants")
    return v


class CalendarItemCreate(_Strict):
    type: ItemType
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    start_at: datetime
    end_at: Optional[datetime] = None
    all_day: bool = False
    status: ItemStatus = ItemStatus.DRAFT
    location: Optional[str] = Field(None, max_length=255)
    participants: Optional[List[ParticipantIn]] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator("start_at", "end_at")
    @classmethod
    def normalize_datetime(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v) if v is not None else v

    check_participants = field_validator("participants")(_unique_participants)


_NOT_NULLABLE_UPDATE_FIELDS = ("type", "title", "start_at", "all_day", "status", "participants")


class CalendarItemUpdate(_Strict):
    """Partial update; createdById is deliberately absent."""

    type: Optional[ItemType] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    all_day: Optional[bool] = None
    status: Optional[ItemStatus] = None
    location: Optional[str] = Field(None, max_length=255)
    participants: Optional[List[ParticipantIn]] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator("start_at", "end_at")
    @classmethod
    def normalize_datetime(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v) if v is not None else v

    check_participants = field_validator("participants")(_unique_participants)

    @model_validator(mode="after")
    def reject_nulls(self) -> "CalendarItemUpdate":
        for name in _NOT_NULLABLE_UPDATE_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def changes(self) -> dict:
        """Column changes only (participants are handled separately)."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name != "participants"
        }


class CalendarItemListQuery(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    date_from: Optional[datetime] = Field(None, alias="from")
    date_to: Optional[datetime] = Field(None, alias="to")
    type: Optional[ItemType] = None
    status: Optional[ItemStatus] = None
    search: Optional[str] = Field(None, max_length=255)
    limit: int = Field(MAX_LIST_LIMIT, ge=1, le=MAX_LIST_LIMIT)

    @field_validator("date_from", "date_to")
    @classmethod
    def normalize_datetime(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v) if v is not None else v

    @field_validator("search")
    @classmethod
    def blank_search_is_none(cls, v: Optional[str]) -> Optional[str]:
        v = (v or "").strip()
        return v or None


def serialize_item(item: CalendarItem) -> dict:
    return {
        "id": item.id,
        "type": item.type.value,
        "title": item.title,
        "description": item.description,
        "startAt": isoformat_utc(item.start_at),
        "endAt": isoformat_utc(item.end_at),
        "allDay": item.all_day,
        "status": item.status.value,
        "location": item.location,
        "createdBy": summary_dict(item.created_by),
        "participants": [
            {
                "userId": p.user_id,
                "role": p.role.value,
                "rsvp": p.rsvp.value if p.rsvp else None,
                "user": summary_dict(p.user),
            }
            for p in item.participants
        ],
        "createdAt": isoformat_utc(item.created_at),
        "updatedAt": isoformat_utc(item.updated_at),
    }
