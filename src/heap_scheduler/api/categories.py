from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..data import CalendarRepository
from .dependencies import get_repository
from .models import CategoryCreate, CategoryUpdate
from .serializers import serialize_category

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("")
async def list_categories(repository: CalendarRepository = Depends(get_repository)) -> List[Dict[str, Any]]:
    return [serialize_category(category) for category in repository.list_categories()]


@router.get("/{category_id}")
async def get_category(category_id: int, repository: CalendarRepository = Depends(get_repository)) -> Dict[str, Any]:
    category = repository.get_category(category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return serialize_category(category)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    repository: CalendarRepository = Depends(get_repository),
) -> Dict[str, Any]:
    return serialize_category(repository.create_category(payload.to_fields()))


@router.put("/{category_id}")
async def update_category(
    category_id: int,
    payload: CategoryUpdate,
    repository: CalendarRepository = Depends(get_repository),
) -> Dict[str, Any]:
    category = repository.update_category(category_id, payload.to_changes())
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return serialize_category(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: int, repository: CalendarRepository = Depends(get_repository)) -> Response:
    if not repository.delete_category(category_id):
        logger.info("Refused to delete category %d", category_id)
        raise HTTPException(status_code=404, detail="Category not found or cannot be deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
