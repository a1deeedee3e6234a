"""Backend abstraction used by the planner session."""

from __future__ import annotations

from typing import Protocol, Sequence

from weekplate.models.recipe import DetailRecord, PlanPreferences, RawPlanEntry
from weekplate.models.schedule import Slot


class PlanBackend(Protocol):
    """Protocol for generative planning backends."""

    async def generate_plan(self, prefs: PlanPreferences) -> list[RawPlanEntry]:
        """Return seven day/title pairs."""

    async def regenerate_dinner(self, day: str, servings: int, prefs: PlanPreferences) -> str:
        """Return a replacement dinner title for one day."""

    async def fetch_details(self, title: str, servings: int) -> DetailRecord:
        """Return ingredients, method and calories for a dinner."""

    async def customize_details(
        self, title: str, servings: int, substitutions: str
    ) -> DetailRecord:
        """Return an adjusted recipe; ``new_title`` is always populated."""

    async def generate_shopping_list(
        self, slots: Sequence[Slot], prefs: PlanPreferences
    ) -> str:
        """Return the raw markdown shopping list for the given days."""

    async def fetch_dish_image(self, title: str) -> str:
        """Return an image handle (data URI or URL) for one dinner, single attempt."""
