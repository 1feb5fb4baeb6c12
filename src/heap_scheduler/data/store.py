from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

import orjson

from ..domain import DEFAULT_CATEGORY_ID, DEFAULT_COLOR, CalendarSettings, utc_now

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


def empty_document() -> Document:
    return {"events": [], "categories": [], "settings": {}}


def seed_document() -> Document:
    return {
        "events": [],
        "categories": [{"id": DEFAULT_CATEGORY_ID, "name": "Default", "color": DEFAULT_COLOR}],
        "settings": CalendarSettings(last_updated=utc_now()).to_record(),
    }


def dump_document(document: Document) -> bytes:
    return orjson.dumps(document, option=orjson.OPT_INDENT_2)


class JsonDocumentStore:
    """Single JSON file holding events, categories and settings."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def ensure_initialized(self) -> None:
        """Create the data directory and a seed document when either is missing."""

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            if not self._path.exists():
                self._path.write_bytes(dump_document(seed_document()) + b"\n")
                logger.info("Initialized calendar data file at %s", self._path)
        except OSError:
            logger.exception("Error initializing data directory %s", self._path.parent)

    def load(self) -> Document:
        """Read the backing file. Any read or parse failure yields an empty document."""

        self.ensure_initialized()
        try:
            document = orjson.loads(self._path.read_bytes())
        except (OSError, orjson.JSONDecodeError):
            logger.exception("Error loading data from %s", self._path)
            return empty_document()
        if not isinstance(document, dict):
            logger.error("Ignoring data file %s: top-level value is not an object", self._path)
            return empty_document()
        return document

    def save(self, document: Document) -> bool:
        try:
            payload = dump_document(document)
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_bytes(payload + b"\n")
        except (OSError, TypeError):
            logger.exception("Error saving data to %s", self._path)
            return False
        return True


__all__ = ["Document", "JsonDocumentStore", "dump_document", "empty_document", "seed_document"]
