from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar, Union

import orjson

from ..domain import (
    DEFAULT_CATEGORY_ID,
    DEFAULT_COLOR,
    CalendarEvent,
    CalendarSettings,
    Category,
    EventKind,
    utc_now,
)
from .store import Document, JsonDocumentStore, dump_document

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", CalendarEvent, Category)

_IMMUTABLE_FIELDS = ("id",)
_SETTINGS_MANAGED_FIELDS = ("id", "last_updated")


def _index(records: Iterable[RecordT]) -> Tuple[Dict[int, RecordT], int]:
    indexed: Dict[int, RecordT] = {}
    highest = 0
    for record in records:
        indexed[record.id] = record
        highest = max(highest, record.id)
    return indexed, highest + 1


def _strip(changes: Mapping[str, Any], names: Iterable[str]) -> Dict[str, Any]:
    return {key: value for key, value in changes.items() if key not in names}


class CalendarRepository:
    """Owns events, categories and settings in memory and writes every mutation through to the store."""

    def __init__(self, store: JsonDocumentStore, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._store = store
        self._clock = clock
        self._events: Dict[int, CalendarEvent] = {}
        self._categories: Dict[int, Category] = {}
        self._settings: CalendarSettings = CalendarSettings()
        self._next_event_id = 1
        self._next_category_id = 1
        self._last_stamp: Optional[datetime] = None
        self.reload()

    # ------------------------------------------------------------------
    # Loading and persistence
    # ------------------------------------------------------------------
    def reload(self) -> None:
        """Replace in-memory state with whatever the store last held."""

        document = self._store.load()
        self._events, next_event = _index(self._parse_loaded(document.get("events"), CalendarEvent.from_record))
        self._categories, next_category = _index(self._parse_loaded(document.get("categories"), Category.from_record))
        if not self._categories:
            self._categories = {DEFAULT_CATEGORY_ID: _default_category()}
            next_category = DEFAULT_CATEGORY_ID + 1

        counters = document.get("counters") if isinstance(document.get("counters"), dict) else {}
        self._next_event_id = max(next_event, _counter(counters, "event"))
        self._next_category_id = max(next_category, _counter(counters, "category"))

        settings = document.get("settings")
        if isinstance(settings, dict) and settings:
            try:
                self._settings = CalendarSettings.from_record(settings)
            except (TypeError, ValueError):
                logger.warning("Discarding unreadable settings record; using defaults.")
                self._settings = CalendarSettings()
        else:
            self._settings = CalendarSettings()
        if self._settings.last_updated is None:
            self._settings.last_updated = self._timestamp()
        logger.debug(
            "Loaded %d events and %d categories from %s",
            len(self._events),
            len(self._categories),
            self._store.path,
        )

    @staticmethod
    def _parse_loaded(records: Any, parse: Callable[[Dict[str, Any]], RecordT]) -> List[RecordT]:
        if not isinstance(records, list):
            return []
        parsed: List[RecordT] = []
        for record in records:
            try:
                parsed.append(parse(record))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping unreadable record: %r", record)
        return parsed

    def snapshot(self) -> Document:
        return {
            "events": [event.to_record() for event in self._events.values()],
            "categories": [category.to_record() for category in self._categories.values()],
            "settings": self._settings.to_record(),
        }

    def _persist(self) -> bool:
        document = self.snapshot()
        document["counters"] = {"event": self._next_event_id, "category": self._next_category_id}
        return self._store.save(document)

    def _timestamp(self) -> datetime:
        stamp = self._clock()
        stamp = stamp.replace(microsecond=stamp.microsecond // 1000 * 1000)
        if self._last_stamp is not None and stamp <= self._last_stamp:
            stamp = self._last_stamp + timedelta(milliseconds=1)
        self._last_stamp = stamp
        return stamp

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def list_events(self) -> List[CalendarEvent]:
        return list(self._events.values())

    def get_event(self, event_id: int) -> Optional[CalendarEvent]:
        return self._events.get(event_id)

    def list_heap_events(self) -> List[CalendarEvent]:
        return [event for event in self._events.values() if event.kind is EventKind.HEAP]

    def list_fixed_events(self) -> List[CalendarEvent]:
        return [event for event in self._events.values() if event.kind is EventKind.FIXED]

    def create_event(self, fields: Mapping[str, Any]) -> CalendarEvent:
        identifier = self._next_event_id
        self._next_event_id += 1
        event = CalendarEvent(id=identifier, **_strip(fields, _IMMUTABLE_FIELDS))
        self._events[identifier] = event
        self._persist()
        return event

    def update_event(self, event_id: int, changes: Mapping[str, Any]) -> Optional[CalendarEvent]:
        existing = self._events.get(event_id)
        if existing is None:
            return None
        updated = replace(existing, **_strip(changes, _IMMUTABLE_FIELDS))
        self._events[event_id] = updated
        self._persist()
        return updated

    def delete_event(self, event_id: int) -> bool:
        if self._events.pop(event_id, None) is None:
            return False
        self._persist()
        return True

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------
    def list_categories(self) -> List[Category]:
        return list(self._categories.values())

    def get_category(self, category_id: int) -> Optional[Category]:
        return self._categories.get(category_id)

    def create_category(self, fields: Mapping[str, Any]) -> Category:
        identifier = self._next_category_id
        self._next_category_id += 1
        category = Category(id=identifier, **_strip(fields, _IMMUTABLE_FIELDS))
        self._categories[identifier] = category
        self._persist()
        return category

    def update_category(self, category_id: int, changes: Mapping[str, Any]) -> Optional[Category]:
        existing = self._categories.get(category_id)
        if existing is None:
            return None
        updated = replace(existing, **_strip(changes, _IMMUTABLE_FIELDS))
        self._categories[category_id] = updated
        self._persist()
        return updated

    def delete_category(self, category_id: int) -> bool:
        """Delete a category and move its events to the default category.

        Neither the default category nor the last remaining one is ever deleted.
        """

        if category_id == DEFAULT_CATEGORY_ID or len(self._categories) <= 1:
            return False
        if self._categories.pop(category_id, None) is None:
            return False
        for event in list(self._events.values()):
            if event.category_id == category_id:
                self._events[event.id] = replace(event, category_id=DEFAULT_CATEGORY_ID)
        self._persist()
        return True

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------
    def get_settings(self) -> CalendarSettings:
        return self._settings

    def update_settings(self, changes: Mapping[str, Any]) -> CalendarSettings:
        self._settings = replace(
            self._settings,
            **_strip(changes, _SETTINGS_MANAGED_FIELDS),
            last_updated=self._timestamp(),
        )
        self._persist()
        return self._settings

    # ------------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------------
    def export_document(self) -> str:
        return dump_document(self.snapshot()).decode("utf-8")

    def import_document(self, raw: Union[str, bytes]) -> bool:
        """Replace every collection with the contents of ``raw``.

        Nothing changes unless the whole document parses.
        """

        try:
            data = orjson.loads(raw)
        except orjson.JSONDecodeError:
            logger.exception("Error importing from JSON")
            return False

        if not isinstance(data, dict):
            return False
        events, categories, settings = data.get("events"), data.get("categories"), data.get("settings")
        if not isinstance(events, list) or not isinstance(categories, list) or not isinstance(settings, dict):
            logger.warning("Rejected import: events/categories must be arrays and settings an object.")
            return False

        try:
            parsed_events = [CalendarEvent.from_record(record) for record in events]
            parsed_categories = [Category.from_record(record) for record in categories]
            parsed_settings = CalendarSettings.from_record(settings)
        except (KeyError, TypeError, ValueError):
            logger.exception("Rejected import: invalid record")
            return False

        self._events, self._next_event_id = _index(parsed_events)
        self._categories, self._next_category_id = _index(parsed_categories)
        if not self._categories:
            self._categories = {DEFAULT_CATEGORY_ID: _default_category()}
            self._next_category_id = DEFAULT_CATEGORY_ID + 1
        self._settings = replace(parsed_settings, last_updated=self._timestamp())
        logger.info("Imported %d events and %d categories", len(self._events), len(self._categories))
        return self._persist()


def _default_category() -> Category:
    return Category(id=DEFAULT_CATEGORY_ID, name="Default", color=DEFAULT_COLOR)


def _counter(counters: Mapping[str, Any], name: str) -> int:
    value = counters.get(name)
    return value if isinstance(value, int) else 0


__all__ = ["CalendarRepository"]
