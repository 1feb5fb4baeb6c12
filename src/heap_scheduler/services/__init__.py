"""Application services shared by the HTTP layer and the CLI."""

from __future__ import annotations

from .advisor import AdvisorError, AdvisorNotConfiguredError, AdvisorRequestError, SchedulingAdvisor
from .context import ServiceContext

__all__ = [
    "AdvisorError",
    "AdvisorNotConfiguredError",
    "AdvisorRequestError",
    "SchedulingAdvisor",
    "ServiceContext",
]
