"""Configuration models and helpers."""

from __future__ import annotations

from .settings import (
    AppSettings,
    LlmSettings,
    LoggingSettings,
    ServerSettings,
    StorageSettings,
    get_settings,
    load_settings,
)

__all__ = [
    "AppSettings",
    "LlmSettings",
    "LoggingSettings",
    "ServerSettings",
    "StorageSettings",
    "get_settings",
    "load_settings",
]
