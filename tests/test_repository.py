from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import orjson
import pytest

from heap_scheduler.data import CalendarRepository, JsonDocumentStore
from heap_scheduler.domain import CalendarView, EventKind

from .conftest import SteppingClock

START = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def _event_fields(title: str = "Standup", **overrides):
    fields = {
        "title": title,
        "start_date": START,
        "end_date": START + timedelta(minutes=30),
        "kind": EventKind.FIXED,
    }
    fields.update(overrides)
    return fields


def _stored(path: Path) -> dict:
    return orjson.loads(path.read_bytes())


def test_fresh_repository_has_default_category_and_settings(repository: CalendarRepository) -> None:
    categories = repository.list_categories()
    assert [(category.id, category.name) for category in categories] == [(1, "Default")]

    settings = repository.get_settings()
    assert settings.id == 1
    assert settings.default_view is CalendarView.MONTH
    assert settings.use_ai is True
    assert settings.last_updated is not None


def test_event_identifiers_are_never_reused(repository: CalendarRepository) -> None:
    first = repository.create_event(_event_fields("one"))
    second = repository.create_event(_event_fields("two"))
    assert repository.delete_event(second.id) is True

    third = repository.create_event(_event_fields("three"))

    assert first.id < second.id < third.id


def test_event_identifiers_survive_a_restart(store: JsonDocumentStore, repository: CalendarRepository) -> None:
    repository.create_event(_event_fields("one"))
    doomed = repository.create_event(_event_fields("two"))
    repository.delete_event(doomed.id)

    reloaded = CalendarRepository(store)

    assert reloaded.create_event(_event_fields("three")).id > doomed.id


def test_create_event_writes_through(data_file: Path, repository: CalendarRepository) -> None:
    event = repository.create_event(_event_fields(location="Room 4"))

    stored = _stored(data_file)["events"]
    assert stored == [event.to_record()]
    assert stored[0]["startDate"] == "2024-01-01T09:00:00.000Z"


def test_update_event_merges_only_given_fields(repository: CalendarRepository) -> None:
    event = repository.create_event(_event_fields(description="daily", location="Room 4"))

    updated = repository.update_event(event.id, {"title": "Sync", "location": None})

    assert updated is not None
    assert updated.title == "Sync"
    assert updated.location is None
    assert updated.description == "daily"
    assert updated.start_date == event.start_date
    assert repository.get_event(event.id) == updated


def test_update_missing_event_returns_none_without_persisting(
    data_file: Path, repository: CalendarRepository
) -> None:
    repository.create_event(_event_fields())
    before = data_file.read_bytes()

    assert repository.update_event(999, {"title": "ghost"}) is None
    assert data_file.read_bytes() == before


def test_delete_missing_event_returns_false(repository: CalendarRepository) -> None:
    assert repository.delete_event(42) is False


def test_heap_and_fixed_filters(repository: CalendarRepository) -> None:
    fixed = repository.create_event(_event_fields("meeting"))
    heap = repository.create_event(_event_fields("taxes", kind=EventKind.HEAP, due_date=START + timedelta(days=3)))

    assert repository.list_heap_events() == [heap]
    assert repository.list_fixed_events() == [fixed]
    assert repository.list_events() == [fixed, heap]


def test_last_category_cannot_be_deleted(data_file: Path, store: JsonDocumentStore) -> None:
    store.save({"events": [], "categories": [{"id": 5, "name": "Only", "color": "#111"}], "settings": {}})
    repository = CalendarRepository(store)
    before = data_file.read_bytes()

    assert repository.delete_category(5) is False
    assert [category.id for category in repository.list_categories()] == [5]
    assert data_file.read_bytes() == before


def test_default_category_cannot_be_deleted(repository: CalendarRepository) -> None:
    repository.create_category({"name": "Work", "color": "#123456"})

    assert repository.delete_category(1) is False
    assert repository.get_category(1) is not None


def test_deleting_category_moves_events_to_default(data_file: Path, repository: CalendarRepository) -> None:
    work = repository.create_category({"name": "Work", "color": "#123456"})
    home = repository.create_category({"name": "Home", "color": "#654321"})
    at_work = repository.create_event(_event_fields("deploy", category_id=work.id))
    at_home = repository.create_event(_event_fields("laundry", category_id=home.id))

    assert repository.delete_category(work.id) is True

    assert repository.get_category(work.id) is None
    assert repository.get_event(at_work.id).category_id == 1
    assert repository.get_event(at_home.id).category_id == home.id
    stored = {record["id"]: record for record in _stored(data_file)["events"]}
    assert stored[at_work.id]["categoryId"] == 1


def test_update_category(repository: CalendarRepository) -> None:
    category = repository.create_category({"name": "Work", "color": "#123456"})

    updated = repository.update_category(category.id, {"color": "#abcdef"})

    assert updated.name == "Work"
    assert updated.color == "#abcdef"
    assert repository.update_category(999, {"name": "nope"}) is None


def test_settings_updates_are_stamped_in_order(repository: CalendarRepository) -> None:
    first = repository.update_settings({"default_view": CalendarView.WEEK})
    first_stamp = first.last_updated
    second = repository.update_settings({"default_view": CalendarView.WEEK})

    assert second.default_view is CalendarView.WEEK
    assert second.last_updated > first_stamp


def test_settings_stamp_advances_even_when_clock_stalls(store: JsonDocumentStore) -> None:
    frozen = SteppingClock(step=timedelta(0))
    repository = CalendarRepository(store, clock=frozen)

    first = repository.update_settings({"theme": "light"}).last_updated
    second = repository.update_settings({"theme": "dark"}).last_updated

    assert second > first


def test_settings_update_ignores_managed_fields(repository: CalendarRepository) -> None:
    settings = repository.update_settings({"id": 9, "use_ai": False})

    assert settings.id == 1
    assert settings.use_ai is False


@pytest.mark.parametrize(
    "document",
    [
        {"categories": [], "settings": {}},
        {"events": [], "settings": {}},
        {"events": [], "categories": []},
        {"events": {}, "categories": [], "settings": {}},
        {"events": [], "categories": "nope", "settings": {}},
        {"events": [{"id": 1}], "categories": [], "settings": {}},
    ],
)
def test_invalid_import_leaves_state_untouched(
    data_file: Path, repository: CalendarRepository, document: dict
) -> None:
    repository.create_event(_event_fields())
    before_state = repository.export_document()
    before_file = data_file.read_bytes()

    assert repository.import_document(orjson.dumps(document)) is False

    assert repository.export_document() == before_state
    assert data_file.read_bytes() == before_file


def test_unparseable_import_returns_false(repository: CalendarRepository) -> None:
    assert repository.import_document("{oops") is False


def test_export_import_round_trip(store: JsonDocumentStore, repository: CalendarRepository) -> None:
    work = repository.create_category({"name": "Work", "color": "#123456"})
    repository.create_event(_event_fields(category_id=work.id, metadata={"source": "test"}))
    repository.create_event(_event_fields("taxes", kind=EventKind.HEAP, due_date=START + timedelta(days=2)))
    repository.update_settings({"theme": "light"})
    exported = orjson.loads(repository.export_document())

    other = CalendarRepository(JsonDocumentStore(store.path.with_name("other.json")))
    assert other.import_document(orjson.dumps(exported)) is True

    reimported = orjson.loads(other.export_document())
    assert reimported["events"] == exported["events"]
    assert reimported["categories"] == exported["categories"]
    exported["settings"].pop("lastUpdated")
    assert {k: v for k, v in reimported["settings"].items() if k != "lastUpdated"} == exported["settings"]


def test_import_recomputes_identifier_counters(repository: CalendarRepository) -> None:
    document = {
        "events": [
            {"id": 10, "title": "a", "startDate": "2024-01-01T09:00:00Z", "endDate": "2024-01-01T10:00:00Z"},
        ],
        "categories": [{"id": 1, "name": "Default", "color": "#6B4EFF"}, {"id": 4, "name": "Work"}],
        "settings": {"defaultView": "day"},
    }

    assert repository.import_document(orjson.dumps(document)) is True

    assert repository.create_event(_event_fields()).id == 11
    assert repository.create_category({"name": "New", "color": "#000000"}).id == 5
    assert repository.get_settings().default_view is CalendarView.DAY


def test_export_excludes_counters(repository: CalendarRepository) -> None:
    repository.create_event(_event_fields())

    assert set(orjson.loads(repository.export_document())) == {"events", "categories", "settings"}


def test_reload_skips_unreadable_records(data_file: Path, store: JsonDocumentStore) -> None:
    store.save(
        {
            "events": [
                {"id": 3, "title": "ok", "startDate": "2024-01-01T09:00:00Z", "endDate": "2024-01-01T10:00:00Z"},
                {"id": 4, "title": "broken"},
            ],
            "categories": [],
            "settings": {},
        }
    )

    repository = CalendarRepository(store)

    assert [event.id for event in repository.list_events()] == [3]
    assert [category.id for category in repository.list_categories()] == [1]
    assert repository.create_event(_event_fields()).id == 4
