"""Concurrent per-day image population."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from weekplate import metrics
from weekplate.fetch.retry import (
    IMAGE_RETRY_POLICY,
    ExhaustedRetries,
    RetryPolicy,
    Sleep,
    attempt,
)
from weekplate.models.schedule import (
    ArtifactState,
    FailedArtifact,
    IdleArtifact,
    LoadingArtifact,
    ReadyArtifact,
)
from weekplate.schedule.store import ScheduleStore

logger = logging.getLogger(__name__)

ERROR_PLACEHOLDER = "https://placehold.co/300x200/ff0000/ffffff?text=Image+Error"

ArtifactFetcher = Callable[[str], Awaitable[str]]


class ArtifactPopulator:
    """Fetch one image per assigned day without letting days block each other.

    Every day runs its own retry chain concurrently and the batch is joined with an
    all-settled gather. Results are written back by day label through
    :meth:`ScheduleStore.write_artifact`, which drops completions that belong to a
    replaced plan or to a day that was edited while the request was in flight.
    """

    def __init__(
        self,
        *,
        policy: RetryPolicy = IMAGE_RETRY_POLICY,
        placeholder: str = ERROR_PLACEHOLDER,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._policy = policy
        self._placeholder = placeholder
        self._sleep = sleep

    @property
    def placeholder(self) -> str:
        return self._placeholder

    async def populate(self, store: ScheduleStore, fetch_artifact: ArtifactFetcher) -> None:
        """Populate every day of the current plan; never raises."""

        generation = store.generation
        pending: list[Awaitable[None]] = []
        for slot in store.schedule.slots:
            if not slot.is_assigned:
                store.write_artifact(
                    slot.label, IdleArtifact(), generation=generation, version=slot.version
                )
                continue
            store.write_artifact(
                slot.label, LoadingArtifact(), generation=generation, version=slot.version
            )
            pending.append(
                self._fetch_into(
                    store,
                    slot.label,
                    slot.title,
                    fetch_artifact,
                    generation=generation,
                    version=slot.version,
                )
            )

        if not pending:
            return
        logger.info("Fetching images for %s day(s) generation=%s", len(pending), generation)
        outcomes = await asyncio.gather(*pending, return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, Exception):
                logger.error("Image population task crashed: %s", outcome)

    async def refresh(
        self,
        store: ScheduleStore,
        label: str,
        fetch_artifact: ArtifactFetcher,
    ) -> None:
        """Fetch the image for a single day after it was edited or regenerated."""

        generation = store.generation
        slot = store.schedule.slot(label)
        if not slot.is_assigned:
            store.write_artifact(label, IdleArtifact(), generation=generation, version=slot.version)
            return
        store.write_artifact(label, LoadingArtifact(), generation=generation, version=slot.version)
        await self._fetch_into(
            store,
            label,
            slot.title,
            fetch_artifact,
            generation=generation,
            version=slot.version,
        )

    async def _fetch_into(
        self,
        store: ScheduleStore,
        label: str,
        title: str,
        fetch_artifact: ArtifactFetcher,
        *,
        generation: int,
        version: int,
    ) -> None:
        state: ArtifactState
        try:
            artifact = await attempt(
                lambda: fetch_artifact(title),
                self._policy,
                is_acceptable=bool,
                description=f"image for {label} ({title})",
                sleep=self._sleep,
            )
            state = ReadyArtifact(artifact=artifact)
        except ExhaustedRetries as exc:
            logger.warning("Failed to load image for %s: %s", title, exc, extra={"day": label})
            state = FailedArtifact(placeholder=self._placeholder)
        except Exception:
            logger.exception("Unexpected error loading image for %s", title, extra={"day": label})
            state = FailedArtifact(placeholder=self._placeholder)

        written = store.write_artifact(label, state, generation=generation, version=version)
        metrics.ARTIFACT_FETCHES.labels(status=state.status if written else "discarded").inc()


__all__ = ["ArtifactFetcher", "ArtifactPopulator", "ERROR_PLACEHOLDER"]
