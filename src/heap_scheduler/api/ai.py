from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from ..data import CalendarRepository
from ..services.advisor import MISSING_KEY_MESSAGE, AdvisorError, SchedulingAdvisor
from ..services.context import ServiceContext
from .dependencies import get_advisor, get_context, get_repository
from .models import DeadlineRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])


def _require_configured(advisor: SchedulingAdvisor, purpose: str) -> None:
    if not advisor.is_configured:
        logger.error("Missing OpenAI API key for %s", purpose)
        raise HTTPException(status_code=500, detail=MISSING_KEY_MESSAGE)


def _upstream_failure(message: str, exc: Exception) -> HTTPException:
    return HTTPException(status_code=500, detail={"message": message, "error": str(exc)})


async def _read_upload(upload: Optional[UploadFile], *, missing: str, limit: int) -> bytes:
    if upload is None:
        raise HTTPException(status_code=400, detail=missing)
    too_large = HTTPException(status_code=413, detail=f"File too large. Maximum size is {limit // (1024 * 1024)}MB")
    if upload.size is not None and upload.size > limit:
        raise too_large
    # Never buffer more than limit + 1 bytes.
    data = await upload.read(limit + 1)
    if not data:
        raise HTTPException(status_code=400, detail=missing)
    if len(data) > limit:
        raise too_large
    return data


@router.post("/schedule")
async def suggest_schedule(
    repository: CalendarRepository = Depends(get_repository),
    advisor: SchedulingAdvisor = Depends(get_advisor),
) -> Any:
    logger.info("Starting AI scheduling recommendation process")
    fixed_events = repository.list_fixed_events()
    heap_events = repository.list_heap_events()
    logger.info("Found %d fixed events and %d heap events", len(fixed_events), len(heap_events))

    if not heap_events:
        return {"recommendations": []}

    _require_configured(advisor, "scheduling")
    try:
        recommendations = await advisor.suggest_schedule(fixed_events, heap_events)
    except AdvisorError as exc:
        raise _upstream_failure("Failed to generate AI scheduling recommendations", exc) from exc
    logger.info("Generated AI scheduling recommendations")
    return recommendations


@router.post("/process-screenshot")
async def process_screenshot(
    screenshot: Optional[UploadFile] = File(None),
    context: ServiceContext = Depends(get_context),
) -> Any:
    data = await _read_upload(
        screenshot,
        missing="No screenshot provided",
        limit=context.settings.server.max_upload_bytes,
    )
    logger.info("Processing screenshot (%d bytes)", len(data))
    _require_configured(context.advisor, "screenshot processing")
    try:
        event_data = await context.advisor.extract_event_from_image(data, screenshot.content_type)
    except AdvisorError as exc:
        raise _upstream_failure("Failed to process screenshot", exc) from exc
    return event_data


@router.post("/process-voice")
async def process_voice(
    audio: Optional[UploadFile] = File(None),
    context: ServiceContext = Depends(get_context),
) -> Dict[str, Any]:
    data = await _read_upload(
        audio,
        missing="No audio file provided",
        limit=context.settings.server.max_upload_bytes,
    )
    logger.info("Processing voice input (%d bytes)", len(data))
    _require_configured(context.advisor, "voice processing")
    try:
        processed = await context.advisor.extract_task_from_audio(data, audio.filename or "voice-input.webm")
    except AdvisorError as exc:
        raise _upstream_failure("Failed to process voice input", exc) from exc
    logger.info("Processed voice input: %.100s", processed["transcription"])
    return processed


@router.post("/suggest-deadline")
async def suggest_deadline(
    payload: DeadlineRequest,
    advisor: SchedulingAdvisor = Depends(get_advisor),
) -> Any:
    if not payload.title:
        raise HTTPException(status_code=400, detail="Task title is required")
    _require_configured(advisor, "deadline suggestion")
    try:
        return await advisor.suggest_deadline(payload.title, payload.description or "")
    except AdvisorError as exc:
        raise _upstream_failure("Failed to suggest deadline", exc) from exc
