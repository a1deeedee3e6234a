"""Resilient access to the generative backend."""

from .retry import (
    IMAGE_RETRY_POLICY,
    ExhaustedRetries,
    RetryPolicy,
    TransientFetchFailure,
    attempt,
    truncate,
)

__all__ = [
    "ExhaustedRetries",
    "IMAGE_RETRY_POLICY",
    "RetryPolicy",
    "TransientFetchFailure",
    "attempt",
    "truncate",
]
