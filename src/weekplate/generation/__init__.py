"""Generative backend clients."""

from .gemini import GeminiClient, build_gemini_client
from .interface import PlanBackend

__all__ = ["GeminiClient", "PlanBackend", "build_gemini_client"]
