"""Derived per-day artifacts (dish images)."""

from .populator import ERROR_PLACEHOLDER, ArtifactFetcher, ArtifactPopulator

__all__ = ["ArtifactFetcher", "ArtifactPopulator", "ERROR_PLACEHOLDER"]
