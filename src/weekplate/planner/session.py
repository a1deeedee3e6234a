"""Interactive weekly planning session.

The session owns a :class:`~weekplate.schedule.store.ScheduleStore`, the preferences the
current plan was generated with, and one :class:`OperationResult` per day for recipe
details. Every backend completion is written back by day label and checked against the
plan generation and day version it was requested for.
"""

from __future__ import annotations

import logging
from typing import Optional

from weekplate.artifacts.populator import ArtifactPopulator
from weekplate.codec import plan_text
from weekplate.config import Settings, get_settings
from weekplate.fetch.retry import ExhaustedRetries, RetryPolicy
from weekplate.generation.gemini import build_gemini_client
from weekplate.generation.interface import PlanBackend
from weekplate.models.recipe import (
    DetailRecord,
    InvalidRequestError,
    PlanPreferences,
    RawPlanEntry,
    validate_preferences,
)
from weekplate.models.results import OperationResult
from weekplate.models.schedule import DAYS, FailedArtifact, LoadingArtifact, Schedule, Slot
from weekplate.parsing.shopping_list import parse_shopping_list
from weekplate.schedule import store as schedule_ops
from weekplate.schedule.store import ScheduleStore

logger = logging.getLogger(__name__)

DetailResult = OperationResult[DetailRecord]


class BackendUnavailableError(RuntimeError):
    """Raised when an operation needs the generative backend and none is configured."""


def schedule_from_entries(entries: list[RawPlanEntry], current: Schedule) -> Schedule:
    """Place generated dinners by day name, keeping each day's servings."""

    by_day: dict[str, str] = {}
    for entry in entries:
        if entry.day not in DAYS:
            logger.warning("Ignoring generated dinner for unknown day %r", entry.day)
            continue
        by_day.setdefault(entry.day, entry.title)

    slots = [
        Slot(label=slot.label, title=by_day.get(slot.label, ""), servings=slot.servings)
        for slot in current.slots
    ]
    return Schedule(slots=tuple(slots))


class PlannerSession:
    """One user's plan plus the operations that edit it."""

    def __init__(
        self,
        backend: Optional[PlanBackend] = None,
        populator: Optional[ArtifactPopulator] = None,
    ) -> None:
        self.backend = backend
        self.populator = populator or ArtifactPopulator()
        self.store = ScheduleStore()
        self.preferences = PlanPreferences()
        self.details: dict[str, DetailResult] = {}
        self.shopping: OperationResult[dict[str, list[str]]] = OperationResult()

    @property
    def schedule(self) -> Schedule:
        return self.store.schedule

    def _require_backend(self) -> PlanBackend:
        if self.backend is None:
            raise BackendUnavailableError("No generative backend configured")
        return self.backend

    def _require_assigned(self, label: str) -> Slot:
        slot = self.store.schedule.slot(label)
        if not slot.is_assigned:
            raise InvalidRequestError(f"No dinner planned for {label}")
        return slot

    def _is_current(self, label: str, generation: int, version: int) -> bool:
        return (
            generation == self.store.generation
            and self.store.schedule.slot(label).version == version
        )

    def _replace_plan(self, schedule: Schedule) -> None:
        self.store.replace(schedule)
        self.details = {}
        self.shopping = OperationResult()

    async def generate(self, prefs: PlanPreferences, *, populate: bool = True) -> Schedule:
        """Request a fresh week of dinners and replace the current plan with it."""

        validate_preferences(prefs)
        backend = self._require_backend()
        entries = await backend.generate_plan(prefs)
        self.preferences = prefs
        self._replace_plan(schedule_from_entries(entries, self.store.schedule))
        logger.info("Generated plan with %s dinner(s)", len(self.store.schedule.assigned()))
        if populate:
            await self.populate_images()
        return self.store.schedule

    async def populate_images(self) -> None:
        if self.backend is None:
            logger.debug("Skipping image population; no backend configured")
            return
        await self.populator.populate(self.store, self.backend.fetch_dish_image)

    async def refresh_image(self, label: str) -> None:
        if self.backend is None:
            return
        await self.populator.refresh(self.store, label, self.backend.fetch_dish_image)

    async def regenerate_day(self, label: str, *, refresh: bool = True) -> Slot:
        backend = self._require_backend()
        slot = self.store.schedule.slot(label)
        generation = self.store.generation
        self.store.write_artifact(
            label, LoadingArtifact(), generation=generation, version=slot.version
        )
        try:
            title = await backend.regenerate_dinner(label, slot.servings, self.preferences)
        except ExhaustedRetries:
            self.store.write_artifact(
                label,
                FailedArtifact(placeholder=self.populator.placeholder),
                generation=generation,
                version=slot.version,
            )
            raise

        if not self._is_current(label, generation, slot.version):
            logger.info("Discarding regenerated dinner for %s; day changed meanwhile", label)
            return self.store.schedule.slot(label)

        self.store.apply(
            lambda schedule: schedule_ops.replace_slot(schedule, label, title=title, refetch=True)
        )
        self.details.pop(label, None)
        logger.info("Regenerated %s: %s", label, title, extra={"day": label})
        if refresh:
            await self.refresh_image(label)
        return self.store.schedule.slot(label)

    async def edit_title(self, label: str, title: str, *, refresh: bool = True) -> Slot:
        self.store.apply(lambda schedule: schedule_ops.set_title(schedule, label, title))
        self.details.pop(label, None)
        if refresh:
            await self.refresh_image(label)
        return self.store.schedule.slot(label)

    def set_servings(self, label: str, servings: int) -> Slot:
        self.store.apply(lambda schedule: schedule_ops.set_servings(schedule, label, servings))
        self.details.pop(label, None)
        return self.store.schedule.slot(label)

    def clear_day(self, label: str) -> Slot:
        self.store.apply(lambda schedule: schedule_ops.clear_slot(schedule, label))
        self.details.pop(label, None)
        return self.store.schedule.slot(label)

    async def load_details(self, label: str) -> DetailRecord:
        """Fetch ingredients, method and calories for one day's dinner."""

        backend = self._require_backend()
        slot = self._require_assigned(label)
        generation = self.store.generation
        self.details[label] = DetailResult.loading()
        try:
            record = await backend.fetch_details(slot.title, slot.servings)
        except ExhaustedRetries as exc:
            if self._is_current(label, generation, slot.version):
                self.details[label] = DetailResult.failed(str(exc))
            raise

        if self._is_current(label, generation, slot.version):
            self.details[label] = DetailResult.ready(record)
        return record

    async def customize(
        self,
        label: str,
        servings: int,
        substitutions: str = "",
        *,
        refresh: bool = True,
    ) -> DetailRecord:
        """Ask for an adjusted recipe and adopt its title and servings for the day."""

        backend = self._require_backend()
        if isinstance(servings, bool) or not isinstance(servings, int) or servings < 1:
            raise InvalidRequestError("Number of people must be greater than 0.")
        slot = self._require_assigned(label)
        generation = self.store.generation
        self.details[label] = DetailResult.loading()
        try:
            record = await backend.customize_details(slot.title, servings, substitutions)
        except ExhaustedRetries as exc:
            if self._is_current(label, generation, slot.version):
                self.details[label] = DetailResult.failed(str(exc))
            raise

        if not self._is_current(label, generation, slot.version):
            logger.info("Discarding customized recipe for %s; day changed meanwhile", label)
            return record

        new_title = (record.new_title or "").strip() or slot.title
        self.store.apply(
            lambda schedule: schedule_ops.replace_slot(
                schedule, label, title=new_title, servings=servings, refetch=True
            )
        )
        self.details[label] = DetailResult.ready(record)
        if refresh:
            await self.refresh_image(label)
        return record

    async def shopping_list(self) -> dict[str, list[str]]:
        """Generate and categorize a shopping list for every planned dinner."""

        backend = self._require_backend()
        assigned = self.store.schedule.assigned()
        if not assigned:
            raise InvalidRequestError(
                "No meals selected for the shopping list. Generate or add some dinners first."
            )
        self.shopping = OperationResult.loading()
        try:
            text = await backend.generate_shopping_list(assigned, self.preferences)
        except ExhaustedRetries as exc:
            self.shopping = OperationResult.failed(str(exc))
            raise
        categories = parse_shopping_list(text)
        self.shopping = OperationResult.ready(categories)
        return categories

    def export_text(self) -> str:
        return plan_text.encode(self.store.schedule)

    async def import_text(self, text: str, *, populate: bool = True) -> Schedule:
        """Replace the plan with one decoded from text; a failed decode changes nothing."""

        schedule = plan_text.decode(text)
        self._replace_plan(schedule)
        logger.info("Imported plan with %s dinner(s)", len(schedule.assigned()))
        if populate:
            await self.populate_images()
        return self.store.schedule


def build_session(
    settings: Optional[Settings] = None,
    backend: Optional[PlanBackend] = None,
) -> PlannerSession:
    """Create a session wired to the configured backend and image retry policy."""

    settings = settings or get_settings()
    populator = ArtifactPopulator(
        policy=RetryPolicy(
            max_attempts=settings.image_retry_attempts,
            delay=settings.image_retry_delay,
        ),
        placeholder=settings.error_placeholder_url,
    )
    if backend is None:
        backend = build_gemini_client(settings)
    return PlannerSession(backend=backend, populator=populator)


__all__ = [
    "BackendUnavailableError",
    "DetailResult",
    "PlannerSession",
    "build_session",
    "schedule_from_entries",
]
