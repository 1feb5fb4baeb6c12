from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Iterable, List, Optional

import orjson
from openai import AsyncOpenAI

from ..config import LlmSettings
from ..domain import CalendarEvent
from .prompts import (
    DEADLINE_PROMPT_TEMPLATE,
    DEADLINE_SYSTEM_PROMPT,
    SCHEDULE_PROMPT_TEMPLATE,
    SCHEDULER_SYSTEM_PROMPT,
    SCREENSHOT_PROMPT,
    SCREENSHOT_SYSTEM_PROMPT,
    VOICE_PROMPT_TEMPLATE,
    VOICE_SYSTEM_PROMPT,
)

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "OpenAI API key is missing. Please set the OPENAI_API_KEY environment variable."


class AdvisorError(RuntimeError):
    """Base class for scheduling advisor failures."""


class AdvisorNotConfiguredError(AdvisorError):
    """Raised when the OpenAI credentials are missing."""


class AdvisorRequestError(AdvisorError):
    """Raised when the upstream model call fails or returns unreadable output."""


def _serialize_events(events: Iterable[CalendarEvent]) -> str:
    return orjson.dumps([event.to_record() for event in events]).decode("utf-8")


class SchedulingAdvisor:
    """Relays calendar data to the language model and returns its JSON reply as-is."""

    def __init__(self, settings: LlmSettings, client: Optional[AsyncOpenAI] = None) -> None:
        self.settings = settings
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or self.settings.is_configured

    def _ensure_client(self) -> AsyncOpenAI:
        if self._client is not None:
            return self._client
        if not self.settings.is_configured:
            raise AdvisorNotConfiguredError(MISSING_KEY_MESSAGE)
        self._client = AsyncOpenAI(
            api_key=self.settings.api_key,
            base_url=self.settings.base_url,
            organization=self.settings.organization,
            project=self.settings.project,
        )
        return self._client

    async def _complete_json(self, messages: List[Dict[str, Any]], *, failure: str) -> Any:
        client = self._ensure_client()
        try:
            completion = await client.chat.completions.create(
                model=self.settings.model,
                messages=messages,
                response_format={"type": "json_object"},
            )
            content = completion.choices[0].message.content or "{}"
            return orjson.loads(content)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Model request failed: %s", failure)
            raise AdvisorRequestError(f"{failure}: {exc}") from exc

    async def suggest_schedule(
        self,
        fixed_events: Iterable[CalendarEvent],
        heap_tasks: Iterable[CalendarEvent],
    ) -> Any:
        prompt = SCHEDULE_PROMPT_TEMPLATE.format(
            events=_serialize_events(fixed_events),
            heap_tasks=_serialize_events(heap_tasks),
        )
        return await self._complete_json(
            [
                {"role": "system", "content": SCHEDULER_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            failure="Failed to generate AI scheduling suggestions",
        )

    async def extract_event_from_image(self, image: bytes, content_type: Optional[str] = None) -> Any:
        encoded = base64.b64encode(image).decode("ascii")
        data_url = f"data:{content_type or 'image/jpeg'};base64,{encoded}"
        return await self._complete_json(
            [
                {"role": "system", "content": SCREENSHOT_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": SCREENSHOT_PROMPT},
                        {"type": "image_url", "image_url": {"url": data_url}},
                    ],
                },
            ],
            failure="Failed to process screenshot",
        )

    async def transcribe(self, audio: bytes, filename: str = "voice-input.webm") -> str:
        client = self._ensure_client()
        try:
            response = await client.audio.transcriptions.create(
                file=(filename, audio),
                model=self.settings.transcription_model,
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("Transcription request failed")
            raise AdvisorRequestError(f"Failed to process voice input: {exc}") from exc
        return response.text

    async def extract_task_from_audio(self, audio: bytes, filename: str = "voice-input.webm") -> Dict[str, Any]:
        transcription = await self.transcribe(audio, filename)
        task_details = await self._complete_json(
            [
                {"role": "system", "content": VOICE_SYSTEM_PROMPT},
                {"role": "user", "content": VOICE_PROMPT_TEMPLATE.format(transcription=transcription)},
            ],
            failure="Failed to process voice input",
        )
        return {"transcription": transcription, "taskDetails": task_details}

    async def suggest_deadline(self, title: str, description: str = "") -> Any:
        prompt = DEADLINE_PROMPT_TEMPLATE.format(
            title=title,
            description=description or "No description provided",
        )
        return await self._complete_json(
            [
                {"role": "system", "content": DEADLINE_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            failure="Failed to suggest deadline",
        )


__all__ = [
    "MISSING_KEY_MESSAGE",
    "AdvisorError",
    "AdvisorNotConfiguredError",
    "AdvisorRequestError",
    "SchedulingAdvisor",
]
