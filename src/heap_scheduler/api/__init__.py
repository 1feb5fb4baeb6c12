"""REST surface: one router per resource."""

from __future__ import annotations

from fastapi import APIRouter

from . import ai, categories, events, settings, transfer

ROUTERS: tuple[APIRouter, ...] = (
    events.router,
    categories.router,
    settings.router,
    transfer.router,
    ai.router,
)

__all__ = ["ROUTERS"]
