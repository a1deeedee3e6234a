"""In-memory weekly schedule state."""

from .store import (
    ScheduleStore,
    UnknownDayError,
    clear_slot,
    replace_slot,
    set_artifact,
    set_servings,
    set_title,
)

__all__ = [
    "ScheduleStore",
    "UnknownDayError",
    "clear_slot",
    "replace_slot",
    "set_artifact",
    "set_servings",
    "set_title",
]
