from __future__ import annotations

import logging
from typing import Any, Dict

import orjson
from fastapi import APIRouter, Depends, HTTPException, Response

from ..data import CalendarRepository
from .dependencies import get_repository
from .models import ImportRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["transfer"])

EXPORT_FILENAME = "calendar-data.json"


@router.get("/export")
async def export_document(repository: CalendarRepository = Depends(get_repository)) -> Response:
    return Response(
        content=repository.export_document(),
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
    )


@router.post("/import")
async def import_document(
    payload: ImportRequest,
    repository: CalendarRepository = Depends(get_repository),
) -> Dict[str, Any]:
    raw = payload.json_data
    if not raw:
        raise HTTPException(status_code=400, detail="No JSON data provided")
    if not isinstance(raw, str):
        try:
            raw = orjson.dumps(raw)
        except orjson.JSONEncodeError:
            logger.warning("Rejected import: jsonData cannot be serialized")
            raise HTTPException(status_code=400, detail="Invalid JSON data format") from None
    if not repository.import_document(raw):
        raise HTTPException(status_code=400, detail="Invalid JSON data format")
    return {"message": "Data imported successfully"}
