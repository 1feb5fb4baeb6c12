from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import orjson
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..domain import (
    DEFAULT_COLOR,
    CalendarEvent,
    CalendarSettings,
    CalendarView,
    Category,
    EventKind,
    format_timestamp,
    parse_timestamp,
    utc_now,
)

HEAP_DEFAULT_DURATION = timedelta(hours=1)


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


def _reject_nulls(model: BaseModel, *names: str) -> None:
    for name in names:
        if name in model.model_fields_set and getattr(model, name) is None:
            alias = type(model).model_fields[name].alias or name
            raise ValueError(f"{alias} cannot be null")


def _coerce_timestamp(value: Any) -> Any:
    if value is None or value == "":
        return None
    return parse_timestamp(value)


def _storable_metadata(value: Any) -> Any:
    try:
        orjson.dumps(value)
    except orjson.JSONEncodeError as exc:
        raise ValueError(f"metadata cannot be stored as JSON: {exc}") from exc
    return value


# ----------------------------------------------------------------------
# Request bodies
# ----------------------------------------------------------------------
class EventCreate(_CamelModel):
    title: str
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_all_day: bool = False
    color: str = DEFAULT_COLOR
    is_pinned: bool = False
    location: Optional[str] = None
    kind: EventKind = Field(default=EventKind.FIXED, alias="type")
    due_date: Optional[datetime] = None
    category_id: Optional[int] = None
    metadata: Any = None

    @field_validator("start_date", "end_date", "due_date", mode="before")
    @classmethod
    def parse_timestamps(cls, value: Any) -> Any:
        return _coerce_timestamp(value)

    @field_validator("metadata")
    @classmethod
    def metadata_is_storable(cls, value: Any) -> Any:
        return _storable_metadata(value)

    @model_validator(mode="after")
    def fill_heap_window(self) -> "EventCreate":
        if self.kind is EventKind.HEAP:
            now = utc_now()
            if self.start_date is None:
                self.start_date = now
            if self.end_date is None:
                self.end_date = now + HEAP_DEFAULT_DURATION
        elif self.start_date is None or self.end_date is None:
            raise ValueError("startDate and endDate are required for fixed events")
        return self

    def to_fields(self) -> Dict[str, Any]:
        return self.model_dump()


class EventUpdate(_CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_all_day: Optional[bool] = None
    color: Optional[str] = None
    is_pinned: Optional[bool] = None
    location: Optional[str] = None
    kind: Optional[EventKind] = Field(default=None, alias="type")
    due_date: Optional[datetime] = None
    category_id: Optional[int] = None
    metadata: Any = None

    @field_validator("start_date", "end_date", "due_date", mode="before")
    @classmethod
    def parse_timestamps(cls, value: Any) -> Any:
        return _coerce_timestamp(value)

    @field_validator("metadata")
    @classmethod
    def metadata_is_storable(cls, value: Any) -> Any:
        return _storable_metadata(value)

    @model_validator(mode="after")
    def required_fields_stay_set(self) -> "EventUpdate":
        _reject_nulls(self, "title", "start_date", "end_date", "is_all_day", "color", "is_pinned", "kind")
        return self

    def to_changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class CategoryCreate(_CamelModel):
    name: str
    color: str = DEFAULT_COLOR

    def to_fields(self) -> Dict[str, Any]:
        return self.model_dump()


class CategoryUpdate(_CamelModel):
    name: Optional[str] = None
    color: Optional[str] = None

    @model_validator(mode="after")
    def required_fields_stay_set(self) -> "CategoryUpdate":
        _reject_nulls(self, "name", "color")
        return self

    def to_changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class SettingsUpdate(_CamelModel):
    default_view: Optional[CalendarView] = None
    default_category: Optional[int] = None
    use_ai: Optional[bool] = Field(default=None, alias="useAI")
    theme: Optional[str] = None

    @model_validator(mode="after")
    def required_fields_stay_set(self) -> "SettingsUpdate":
        _reject_nulls(self, "default_view", "use_ai", "theme")
        return self

    def to_changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ImportRequest(_CamelModel):
    json_data: Any = None


class DeadlineRequest(_CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None


# ----------------------------------------------------------------------
# Response payloads
# ----------------------------------------------------------------------
class CategoryPayload(_CamelModel):
    id: int
    name: str
    color: str

    @classmethod
    def from_domain(cls, category: Category) -> "CategoryPayload":
        return cls(id=category.id, name=category.name, color=category.color)


class EventPayload(_CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    start_date: str
    end_date: str
    is_all_day: bool
    color: str
    is_pinned: bool
    location: Optional[str] = None
    kind: str = Field(alias="type")
    due_date: Optional[str] = None
    category_id: Optional[int] = None
    metadata: Any = None

    @classmethod
    def from_domain(cls, event: CalendarEvent) -> "EventPayload":
        return cls(
            id=event.id,
            title=event.title,
            description=event.description,
            start_date=format_timestamp(event.start_date),
            end_date=format_timestamp(event.end_date),
            is_all_day=event.is_all_day,
            color=event.color,
            is_pinned=event.is_pinned,
            location=event.location,
            kind=event.kind.value,
            due_date=_iso(event.due_date),
            category_id=event.category_id,
            metadata=event.metadata,
        )


class SettingsPayload(_CamelModel):
    id: int
    default_view: str
    default_category: Optional[int] = None
    use_ai: bool = Field(alias="useAI")
    theme: str
    last_updated: Optional[str] = None

    @classmethod
    def from_domain(cls, settings: CalendarSettings) -> "SettingsPayload":
        return cls(
            id=settings.id,
            default_view=settings.default_view.value,
            default_category=settings.default_category,
            use_ai=settings.use_ai,
            theme=settings.theme,
            last_updated=_iso(settings.last_updated),
        )


def _iso(value: Optional[datetime]) -> Optional[str]:
    return format_timestamp(value) if value else None
