"""Per-operation status records."""

from __future__ import annotations

from typing import Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class OperationResult(BaseModel, Generic[T]):
    """Status of one request, attached to the entity it describes."""

    status: Literal["idle", "loading", "ready", "failed"] = "idle"
    value: Optional[T] = Field(default=None)
    error: Optional[str] = Field(default=None)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def loading(cls) -> "OperationResult[T]":
        return cls(status="loading")

    @classmethod
    def ready(cls, value: T) -> "OperationResult[T]":
        return cls(status="ready", value=value)

    @classmethod
    def failed(cls, error: str) -> "OperationResult[T]":
        return cls(status="failed", error=error)


__all__ = ["OperationResult"]
