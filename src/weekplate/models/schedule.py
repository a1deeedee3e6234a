"""Weekly schedule models."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

Day = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

DAYS: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


class UnknownDayError(KeyError):
    """Raised when a label is not one of the canonical days."""

    def __init__(self, label: str) -> None:
        super().__init__(label)
        self.label = label

    def __str__(self) -> str:
        return f"Unknown day '{self.label}'"


class IdleArtifact(BaseModel):
    """No image requested for the day."""

    status: Literal["idle"] = "idle"

    model_config = ConfigDict(frozen=True)


class LoadingArtifact(BaseModel):
    """Image request in flight."""

    status: Literal["loading"] = "loading"

    model_config = ConfigDict(frozen=True)


class ReadyArtifact(BaseModel):
    """Image successfully generated."""

    status: Literal["ready"] = "ready"
    artifact: str

    model_config = ConfigDict(frozen=True)


class FailedArtifact(BaseModel):
    """Image generation exhausted its retries; a placeholder is shown instead."""

    status: Literal["failed"] = "failed"
    placeholder: str

    model_config = ConfigDict(frozen=True)


ArtifactState = Annotated[
    Union[IdleArtifact, LoadingArtifact, ReadyArtifact, FailedArtifact],
    Field(discriminator="status"),
]


class Slot(BaseModel):
    """A single day of the plan."""

    label: Day
    title: str = Field(default="")
    servings: int = Field(default=1, ge=1)
    artifact: ArtifactState = Field(default_factory=IdleArtifact)
    version: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)

    @property
    def is_assigned(self) -> bool:
        return bool(self.title.strip())


class Schedule(BaseModel):
    """Seven slots in canonical day order."""

    slots: tuple[Slot, ...]

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _require_canonical_days(self) -> "Schedule":
        labels = tuple(slot.label for slot in self.slots)
        if labels != DAYS:
            raise ValueError(
                f"schedule must contain exactly the days {', '.join(DAYS)} in order; got {labels}"
            )
        return self

    @classmethod
    def empty(cls) -> "Schedule":
        return cls(slots=tuple(Slot(label=day) for day in DAYS))

    def index_of(self, label: str) -> int:
        try:
            return DAYS.index(label)
        except ValueError:
            raise UnknownDayError(label) from None

    def slot(self, label: str) -> Slot:
        return self.slots[self.index_of(label)]

    def assigned(self) -> list[Slot]:
        """Return the days that currently have a dinner, in day order."""

        return [slot for slot in self.slots if slot.is_assigned]


__all__ = [
    "ArtifactState",
    "DAYS",
    "Day",
    "FailedArtifact",
    "IdleArtifact",
    "LoadingArtifact",
    "ReadyArtifact",
    "Schedule",
    "Slot",
    "UnknownDayError",
]
