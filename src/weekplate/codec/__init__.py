"""Portable text formats for the weekly plan."""

from .plan_text import EXPECTED_FORMAT, PlanImportError, clean_title, decode, encode

__all__ = ["EXPECTED_FORMAT", "PlanImportError", "clean_title", "decode", "encode"]
