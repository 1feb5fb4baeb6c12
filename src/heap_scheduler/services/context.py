from __future__ import annotations

from dataclasses import dataclass, field

from ..config import AppSettings, get_settings
from ..data import CalendarRepository, JsonDocumentStore
from .advisor import SchedulingAdvisor


@dataclass(slots=True)
class ServiceContext:
    """Aggregate root shared by request handlers: settings, store, repository and advisor."""

    settings: AppSettings = field(default_factory=get_settings)
    store: JsonDocumentStore = field(init=False)
    repository: CalendarRepository = field(init=False)
    advisor: SchedulingAdvisor = field(init=False)

    def __post_init__(self) -> None:
        self.store = JsonDocumentStore(self.settings.storage.data_file)
        self.repository = CalendarRepository(self.store)
        self.advisor = SchedulingAdvisor(self.settings.llm)
