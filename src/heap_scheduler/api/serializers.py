from __future__ import annotations

from typing import Any, Dict, Iterable, List

from ..domain import CalendarEvent, CalendarSettings, Category
from .models import CategoryPayload, EventPayload, SettingsPayload


def serialize_category(category: Category) -> Dict[str, Any]:
    return CategoryPayload.from_domain(category).model_dump(by_alias=True)


def serialize_event(event: CalendarEvent) -> Dict[str, Any]:
    return EventPayload.from_domain(event).model_dump(by_alias=True)


def serialize_events(events: Iterable[CalendarEvent]) -> List[Dict[str, Any]]:
    return [serialize_event(event) for event in events]


def serialize_settings(settings: CalendarSettings) -> Dict[str, Any]:
    return SettingsPayload.from_domain(settings).model_dump(by_alias=True)
