"""Planning session orchestration."""

from .session import (
    BackendUnavailableError,
    DetailResult,
    PlannerSession,
    build_session,
    schedule_from_entries,
)

__all__ = [
    "BackendUnavailableError",
    "DetailResult",
    "PlannerSession",
    "build_session",
    "schedule_from_entries",
]
