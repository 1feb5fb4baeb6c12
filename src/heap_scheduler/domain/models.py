from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .enums import CalendarView, EventKind

DEFAULT_COLOR = "#6B4EFF"
DEFAULT_CATEGORY_ID = 1
SETTINGS_ID = 1


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 value into an aware UTC datetime. Naive values are taken as UTC."""

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as exc:
            raise ValueError(f"Invalid ISO timestamp: {value}") from exc
    else:
        raise ValueError(f"Unsupported timestamp value: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _optional_timestamp(value: Any) -> Optional[datetime]:
    return parse_timestamp(value) if value else None


def _optional_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


@dataclass(slots=True)
class Category:
    id: int
    name: str
    color: str = DEFAULT_COLOR

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Category":
        return cls(
            id=int(record["id"]),
            name=str(record["name"]),
            color=record.get("color") or DEFAULT_COLOR,
        )

    def to_record(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}


@dataclass(slots=True)
class CalendarEvent:
    id: int
    title: str
    start_date: datetime
    end_date: datetime
    description: Optional[str] = None
    is_all_day: bool = False
    color: str = DEFAULT_COLOR
    is_pinned: bool = False
    location: Optional[str] = None
    kind: EventKind = EventKind.FIXED
    due_date: Optional[datetime] = None
    category_id: Optional[int] = None
    metadata: Any = None

    @property
    def is_heap(self) -> bool:
        return self.kind is EventKind.HEAP

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CalendarEvent":
        return cls(
            id=int(record["id"]),
            title=str(record["title"]),
            start_date=parse_timestamp(record["startDate"]),
            end_date=parse_timestamp(record["endDate"]),
            description=record.get("description"),
            is_all_day=bool(record.get("isAllDay", False)),
            color=record.get("color") or DEFAULT_COLOR,
            is_pinned=bool(record.get("isPinned", False)),
            location=record.get("location"),
            kind=EventKind(record.get("type") or EventKind.FIXED),
            due_date=_optional_timestamp(record.get("dueDate")),
            category_id=_optional_int(record.get("categoryId")),
            metadata=record.get("metadata"),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "startDate": format_timestamp(self.start_date),
            "endDate": format_timestamp(self.end_date),
            "isAllDay": self.is_all_day,
            "color": self.color,
            "isPinned": self.is_pinned,
            "location": self.location,
            "type": self.kind.value,
            "dueDate": format_timestamp(self.due_date) if self.due_date else None,
            "categoryId": self.category_id,
            "metadata": self.metadata,
        }


@dataclass(slots=True)
class CalendarSettings:
    id: int = SETTINGS_ID
    default_view: CalendarView = CalendarView.MONTH
    default_category: Optional[int] = DEFAULT_CATEGORY_ID
    use_ai: bool = True
    theme: str = "dark"
    last_updated: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CalendarSettings":
        return cls(
            id=SETTINGS_ID,
            default_view=CalendarView(record.get("defaultView") or CalendarView.MONTH),
            default_category=_optional_int(record.get("defaultCategory", DEFAULT_CATEGORY_ID)),
            use_ai=bool(record.get("useAI", True)),
            theme=str(record.get("theme") or "dark"),
            last_updated=_optional_timestamp(record.get("lastUpdated")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "defaultView": self.default_view.value,
            "defaultCategory": self.default_category,
            "useAI": self.use_ai,
            "theme": self.theme,
            "lastUpdated": format_timestamp(self.last_updated) if self.last_updated else None,
        }
