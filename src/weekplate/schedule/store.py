"""By-day updates over the immutable weekly schedule."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from weekplate.models.recipe import InvalidRequestError
from weekplate.models.schedule import (
    ArtifactState,
    IdleArtifact,
    LoadingArtifact,
    Schedule,
    Slot,
    UnknownDayError,
)

logger = logging.getLogger(__name__)

ScheduleUpdate = Callable[[Schedule], Schedule]


def _with_slot(schedule: Schedule, label: str, **changes: object) -> Schedule:
    index = schedule.index_of(label)
    slots = list(schedule.slots)
    slots[index] = slots[index].model_copy(update=changes)
    return Schedule(slots=tuple(slots))


def _bumped(slot: Slot) -> int:
    return slot.version + 1


def _require_servings(servings: object) -> int:
    if isinstance(servings, bool) or not isinstance(servings, int) or servings < 1:
        raise InvalidRequestError(
            f"Servings must be a whole number greater than 0 (got {servings!r})"
        )
    return servings


def set_title(schedule: Schedule, label: str, title: str) -> Schedule:
    """Rename a day's dinner; the old image no longer applies."""

    slot = schedule.slot(label)
    return _with_slot(
        schedule,
        label,
        title=title.strip(),
        artifact=IdleArtifact(),
        version=_bumped(slot),
    )


def set_servings(schedule: Schedule, label: str, servings: int) -> Schedule:
    schedule.index_of(label)
    return _with_slot(schedule, label, servings=_require_servings(servings))


def clear_slot(schedule: Schedule, label: str) -> Schedule:
    slot = schedule.slot(label)
    return _with_slot(
        schedule,
        label,
        title="",
        servings=1,
        artifact=IdleArtifact(),
        version=_bumped(slot),
    )


def replace_slot(
    schedule: Schedule,
    label: str,
    *,
    title: str,
    servings: Optional[int] = None,
    refetch: bool = False,
) -> Schedule:
    """Replace a day wholesale, as regeneration and customization do.

    ``refetch`` marks the artifact as loading because the caller is about to request a
    new image for the replacement title.
    """

    slot = schedule.slot(label)
    return _with_slot(
        schedule,
        label,
        title=title.strip(),
        servings=_require_servings(servings) if servings is not None else slot.servings,
        artifact=LoadingArtifact() if refetch else IdleArtifact(),
        version=_bumped(slot),
    )


def set_artifact(schedule: Schedule, label: str, state: ArtifactState) -> Schedule:
    return _with_slot(schedule, label, artifact=state)


class ScheduleStore:
    """Holder of the session's current plan.

    Updates are pure functions applied to whatever snapshot is current at write time, so
    a completion that was awaited across a suspension point never writes back a stale copy
    of the whole week. ``generation`` increments whenever a new plan replaces the old one.
    """

    def __init__(self, schedule: Optional[Schedule] = None) -> None:
        self._schedule = schedule or Schedule.empty()
        self._generation = 0

    @property
    def schedule(self) -> Schedule:
        return self._schedule

    @property
    def generation(self) -> int:
        return self._generation

    def replace(self, schedule: Schedule) -> int:
        self._schedule = schedule
        self._generation += 1
        logger.debug("Plan replaced; generation=%s", self._generation)
        return self._generation

    def apply(self, update: ScheduleUpdate) -> Schedule:
        self._schedule = update(self._schedule)
        return self._schedule

    def write_artifact(
        self,
        label: str,
        state: ArtifactState,
        *,
        generation: int,
        version: int,
    ) -> bool:
        """Store an image result unless the plan or the day changed since it was requested."""

        if generation != self._generation:
            logger.debug(
                "Discarding %s artifact for %s from superseded plan generation=%s",
                state.status,
                label,
                generation,
            )
            return False
        current = self._schedule.slot(label)
        if current.version != version:
            logger.debug(
                "Discarding %s artifact for %s; day edited since request (version %s != %s)",
                state.status,
                label,
                version,
                current.version,
            )
            return False
        self._schedule = set_artifact(self._schedule, label, state)
        return True


__all__ = [
    "ScheduleStore",
    "UnknownDayError",
    "clear_slot",
    "replace_slot",
    "set_artifact",
    "set_servings",
    "set_title",
]
