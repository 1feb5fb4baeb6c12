from __future__ import annotations

from fastapi import Depends, Request

from ..data import CalendarRepository
from ..services.advisor import SchedulingAdvisor
from ..services.context import ServiceContext


def get_context(request: Request) -> ServiceContext:
    return request.app.state.context


def get_repository(context: ServiceContext = Depends(get_context)) -> CalendarRepository:
    return context.repository


def get_advisor(context: ServiceContext = Depends(get_context)) -> SchedulingAdvisor:
    return context.advisor
