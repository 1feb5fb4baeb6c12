from __future__ import annotations

from enum import Enum


class EventKind(str, Enum):
    FIXED = "fixed"
    HEAP = "heap"


class CalendarView(str, Enum):
    MONTH = "month"
    WEEK = "week"
    DAY = "day"
