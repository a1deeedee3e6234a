"""Request and recipe models exchanged with the generative backend."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

FACILITIES: tuple[str, ...] = (
    "Oven",
    "Hob",
    "Microwave",
    "Toaster",
    "Grill",
    "Kettle",
    "Steamer",
    "Slow Cooker",
    "Air Fryer",
    "Blender",
    "Pressure Cooker",
)


class InvalidRequestError(ValueError):
    """Raised when a request is rejected before any backend call is made."""


class PlanPreferences(BaseModel):
    """Household preferences applied to every generation request."""

    dietary_preferences: str = Field(default="", max_length=1000)
    allergies: str = Field(default="", max_length=1000)
    specific_requirements: str = Field(default="", max_length=1000)
    limited_facilities: bool = Field(default=False)
    facilities: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class RawPlanEntry(BaseModel):
    """A day/title pair as returned by plan generation."""

    day: str
    title: str

    model_config = ConfigDict(frozen=True)


class DetailRecord(BaseModel):
    """Ingredients, method and calorie estimate for one dinner."""

    ingredients: list[str] = Field(default_factory=list)
    instructions: str
    calories: str
    new_title: Optional[str] = Field(default=None, alias="newMealName")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


def validate_preferences(prefs: PlanPreferences) -> None:
    """Reject preference combinations that cannot produce a sensible prompt."""

    if prefs.limited_facilities and not prefs.facilities:
        raise InvalidRequestError(
            'Please select at least one cooking facility or uncheck "Limited Cooking Facilities".'
        )
    unknown = [facility for facility in prefs.facilities if facility not in FACILITIES]
    if unknown:
        raise InvalidRequestError(f"Unknown cooking facilities: {', '.join(unknown)}")


__all__ = [
    "DetailRecord",
    "FACILITIES",
    "InvalidRequestError",
    "PlanPreferences",
    "RawPlanEntry",
    "validate_preferences",
]
