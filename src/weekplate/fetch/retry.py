"""Bounded constant-delay retry for calls into the generative backend.

The image endpoint is quota limited and fails intermittently, so each logical call is
attempted up to ``RetryPolicy.max_attempts`` times, one attempt at a time. Intermediate
failures are only logged at DEBUG; the caller sees a single :class:`ExhaustedRetries`
carrying the last failure's cause and a truncated copy of the raw response.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Awaitable, Callable, Optional, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, Field

from weekplate import metrics

logger = logging.getLogger(__name__)

T = TypeVar("T")

RAW_PREVIEW_LIMIT = 200

Sleep = Callable[[float], Awaitable[None]]


class RetryPolicy(BaseModel):
    """Attempt budget and constant delay between failed attempts."""

    max_attempts: int = Field(default=1, ge=1)
    delay: float = Field(default=0.0, ge=0)

    model_config = ConfigDict(frozen=True)


IMAGE_RETRY_POLICY = RetryPolicy(max_attempts=5, delay=2.0)


def truncate(text: str, limit: int = RAW_PREVIEW_LIMIT) -> str:
    cleaned = text.strip().replace("\n", " ")
    if len(cleaned) <= limit:
        return cleaned
    return cleaned[:limit] + "..."


class TransientFetchFailure(RuntimeError):
    """A single unsuccessful attempt; recovered by retrying."""

    def __init__(self, cause: str, raw: Optional[str] = None) -> None:
        super().__init__(cause)
        self.cause = cause
        self.raw = raw


class ExhaustedRetries(RuntimeError):
    """Every allowed attempt of one logical call failed."""

    def __init__(
        self,
        description: str,
        attempts: int,
        cause: str,
        raw: Optional[str] = None,
    ) -> None:
        self.description = description
        self.attempts = attempts
        self.cause = cause
        self.raw = truncate(raw) if raw else None
        message = f"{description or 'request'} failed after {attempts} attempt(s): {cause}"
        if self.raw:
            message = f"{message} - {self.raw}"
        super().__init__(message)


def _describe_failure(exc: Exception) -> tuple[str, Optional[str]]:
    if isinstance(exc, TransientFetchFailure):
        return exc.cause, exc.raw
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP status {exc.response.status_code}", exc.response.text
    if isinstance(exc, json.JSONDecodeError):
        return f"invalid JSON response: {exc}", exc.doc
    return f"{type(exc).__name__}: {exc}", None


async def attempt(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    is_acceptable: Optional[Callable[[T], bool]] = None,
    *,
    description: str = "",
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Run ``operation`` until it yields an acceptable result or the policy is spent."""

    cause = "no attempt made"
    raw: Optional[str] = None
    last_exc: Optional[Exception] = None

    for attempt_number in range(1, policy.max_attempts + 1):
        try:
            result = await operation()
        except Exception as exc:
            last_exc = exc
            cause, raw = _describe_failure(exc)
        else:
            if is_acceptable is None or is_acceptable(result):
                metrics.FETCH_ATTEMPTS.labels(outcome="success").inc()
                return result
            last_exc = None
            cause, raw = "missing expected field", str(result)

        metrics.FETCH_ATTEMPTS.labels(outcome="failure").inc()
        if attempt_number < policy.max_attempts:
            logger.debug(
                "Attempt %s/%s for %s failed: %s",
                attempt_number,
                policy.max_attempts,
                description or "request",
                cause,
            )
            await sleep(policy.delay)

    error = ExhaustedRetries(description, policy.max_attempts, cause, raw)
    logger.warning("%s", error)
    if last_exc is not None:
        raise error from last_exc
    raise error


__all__ = [
    "ExhaustedRetries",
    "IMAGE_RETRY_POLICY",
    "RetryPolicy",
    "TransientFetchFailure",
    "attempt",
    "truncate",
]
