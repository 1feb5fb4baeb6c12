from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..data import CalendarRepository
from .dependencies import get_repository
from .models import EventCreate, EventUpdate
from .serializers import serialize_event, serialize_events

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["events"])


@router.get("/events")
async def list_events(repository: CalendarRepository = Depends(get_repository)) -> List[Dict[str, Any]]:
    return serialize_events(repository.list_events())


@router.get("/events/{event_id}")
async def get_event(event_id: int, repository: CalendarRepository = Depends(get_repository)) -> Dict[str, Any]:
    event = repository.get_event(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return serialize_event(event)


@router.post("/events", status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreate,
    repository: CalendarRepository = Depends(get_repository),
) -> Dict[str, Any]:
    event = repository.create_event(payload.to_fields())
    logger.info("Created %s event %d", event.kind.value, event.id)
    return serialize_event(event)


@router.put("/events/{event_id}")
async def update_event(
    event_id: int,
    payload: EventUpdate,
    repository: CalendarRepository = Depends(get_repository),
) -> Dict[str, Any]:
    event = repository.update_event(event_id, payload.to_changes())
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return serialize_event(event)


@router.delete("/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(event_id: int, repository: CalendarRepository = Depends(get_repository)) -> Response:
    if not repository.delete_event(event_id):
        raise HTTPException(status_code=404, detail="Event not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/heap")
async def list_heap_events(repository: CalendarRepository = Depends(get_repository)) -> List[Dict[str, Any]]:
    return serialize_events(repository.list_heap_events())


@router.get("/fixed-events")
async def list_fixed_events(repository: CalendarRepository = Depends(get_repository)) -> List[Dict[str, Any]]:
    return serialize_events(repository.list_fixed_events())
