"""Pydantic models defining shared data contracts."""

from weekplate.models.recipe import (
    FACILITIES,
    DetailRecord,
    InvalidRequestError,
    PlanPreferences,
    RawPlanEntry,
    validate_preferences,
)
from weekplate.models.results import OperationResult
from weekplate.models.schedule import (
    DAYS,
    ArtifactState,
    Day,
    FailedArtifact,
    IdleArtifact,
    LoadingArtifact,
    ReadyArtifact,
    Schedule,
    Slot,
    UnknownDayError,
)

CategorizedList = dict[str, list[str]]

__all__ = [
    "ArtifactState",
    "CategorizedList",
    "DAYS",
    "Day",
    "DetailRecord",
    "FACILITIES",
    "FailedArtifact",
    "IdleArtifact",
    "InvalidRequestError",
    "LoadingArtifact",
    "OperationResult",
    "PlanPreferences",
    "RawPlanEntry",
    "ReadyArtifact",
    "Schedule",
    "Slot",
    "UnknownDayError",
    "validate_preferences",
]
