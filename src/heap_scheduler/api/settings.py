from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..data import CalendarRepository
from .dependencies import get_repository
from .models import SettingsUpdate
from .serializers import serialize_settings

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("")
async def read_settings(repository: CalendarRepository = Depends(get_repository)) -> Dict[str, Any]:
    return serialize_settings(repository.get_settings())


@router.put("")
async def update_settings(
    payload: SettingsUpdate,
    repository: CalendarRepository = Depends(get_repository),
) -> Dict[str, Any]:
    return serialize_settings(repository.update_settings(payload.to_changes()))
