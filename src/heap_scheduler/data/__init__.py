"""Data access layer: the JSON document store and the in-memory repository."""

from __future__ import annotations

from .repository import CalendarRepository
from .store import Document, JsonDocumentStore, empty_document, seed_document

__all__ = ["CalendarRepository", "Document", "JsonDocumentStore", "empty_document", "seed_document"]
