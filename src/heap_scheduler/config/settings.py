from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from platformdirs import user_data_dir

load_dotenv()

APP_NAME = "Heap Scheduler"
APP_AUTHOR = "HeapScheduler"
DATA_DIR = Path(user_data_dir(APP_NAME, APP_AUTHOR))


@dataclass(frozen=True)
class LlmSettings:
    api_key: Optional[str]
    model: str
    transcription_model: str
    base_url: Optional[str]
    organization: Optional[str]
    project: Optional[str]

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def missing_env_vars(self) -> list[str]:
        missing = []
        if not self.api_key:
            missing.append("OPENAI_API_KEY")
        return missing


@dataclass(frozen=True)
class StorageSettings:
    data_file: Path


@dataclass(frozen=True)
class ServerSettings:
    host: str
    port: int
    max_upload_bytes: int
    cors_origins: tuple[str, ...]


@dataclass(frozen=True)
class LoggingSettings:
    level: str
    log_file: Path


@dataclass(frozen=True)
class AppSettings:
    llm: LlmSettings
    storage: StorageSettings
    server: ServerSettings
    logging: LoggingSettings


def _int_from_env(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _origins_from_env(environ: Mapping[str, str]) -> tuple[str, ...]:
    raw = environ.get("HEAP_SCHEDULER_CORS_ORIGINS", "*")
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


def load_settings(environ: Optional[Mapping[str, str]] = None) -> AppSettings:
    """Build settings from ``environ`` (defaults to the process environment)."""

    env = os.environ if environ is None else environ

    llm = LlmSettings(
        api_key=env.get("OPENAI_API_KEY") or None,
        model=env.get("OPENAI_MODEL", "gpt-4o"),
        transcription_model=env.get("OPENAI_TRANSCRIPTION_MODEL", "whisper-1"),
        base_url=env.get("OPENAI_BASE_URL"),
        organization=env.get("OPENAI_ORG"),
        project=env.get("OPENAI_PROJECT"),
    )

    data_file = env.get("HEAP_SCHEDULER_DATA_FILE")
    storage = StorageSettings(
        data_file=Path(data_file) if data_file else DATA_DIR / "calendar.json",
    )

    server = ServerSettings(
        host=env.get("HEAP_SCHEDULER_HOST", "127.0.0.1"),
        port=_int_from_env(env, "HEAP_SCHEDULER_PORT", 5000),
        max_upload_bytes=_int_from_env(env, "HEAP_SCHEDULER_MAX_UPLOAD_MB", 10) * 1024 * 1024,
        cors_origins=_origins_from_env(env),
    )

    log_file = env.get("HEAP_SCHEDULER_LOG_FILE")
    logging = LoggingSettings(
        level=env.get("HEAP_SCHEDULER_LOG_LEVEL", "INFO").upper(),
        log_file=Path(log_file) if log_file else DATA_DIR / "heap_scheduler.log",
    )

    return AppSettings(llm=llm, storage=storage, server=server, logging=logging)


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return load_settings()
