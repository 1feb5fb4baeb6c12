"""Domain records for events, categories and calendar settings."""

from __future__ import annotations

from .enums import CalendarView, EventKind
from .models import (
    DEFAULT_CATEGORY_ID,
    DEFAULT_COLOR,
    SETTINGS_ID,
    CalendarEvent,
    CalendarSettings,
    Category,
    format_timestamp,
    parse_timestamp,
    utc_now,
)

__all__ = [
    "DEFAULT_CATEGORY_ID",
    "DEFAULT_COLOR",
    "SETTINGS_ID",
    "CalendarEvent",
    "CalendarSettings",
    "CalendarView",
    "Category",
    "EventKind",
    "format_timestamp",
    "parse_timestamp",
    "utc_now",
]
