from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import orjson
import pytest
from fastapi.testclient import TestClient

from heap_scheduler.config import AppSettings, load_settings
from heap_scheduler.data import CalendarRepository, JsonDocumentStore
from heap_scheduler.services import SchedulingAdvisor, ServiceContext
from heap_scheduler.services.http import create_app


class SteppingClock:
    """Deterministic clock that advances by ``step`` on every read."""

    def __init__(self, start: Optional[datetime] = None, step: timedelta = timedelta(seconds=1)) -> None:
        self.current = start or datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


class FakeCompletions:
    def __init__(self, replies: List[Any]) -> None:
        self.replies = list(replies)
        self.calls: List[Dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        content = reply if isinstance(reply, str) else orjson.dumps(reply).decode("utf-8")
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeTranscriptions:
    def __init__(self, text: str) -> None:
        self.text = text
        self.calls: List[Dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        return SimpleNamespace(text=self.text)


class FakeOpenAI:
    """Stands in for ``AsyncOpenAI`` with canned JSON replies."""

    def __init__(self, *replies: Any, transcription: str = "") -> None:
        self.completions = FakeCompletions(list(replies))
        self.transcriptions = FakeTranscriptions(transcription)
        self.chat = SimpleNamespace(completions=self.completions)
        self.audio = SimpleNamespace(transcriptions=self.transcriptions)


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    return tmp_path / "data" / "calendar.json"


@pytest.fixture
def settings(data_file: Path, tmp_path: Path) -> AppSettings:
    return load_settings(
        {
            "HEAP_SCHEDULER_DATA_FILE": str(data_file),
            "HEAP_SCHEDULER_LOG_FILE": str(tmp_path / "heap_scheduler.log"),
        }
    )


@pytest.fixture
def store(data_file: Path) -> JsonDocumentStore:
    return JsonDocumentStore(data_file)


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def repository(store: JsonDocumentStore, clock: SteppingClock) -> CalendarRepository:
    return CalendarRepository(store, clock=clock)


@pytest.fixture
def context(settings: AppSettings) -> ServiceContext:
    return ServiceContext(settings=settings)


@pytest.fixture
def client(context: ServiceContext) -> TestClient:
    return TestClient(create_app(context))


@pytest.fixture
def fake_openai(context: ServiceContext):
    def install(*replies: Any, transcription: str = "") -> FakeOpenAI:
        fake = FakeOpenAI(*replies, transcription=transcription)
        context.advisor = SchedulingAdvisor(context.settings.llm, client=fake)
        return fake

    return install
