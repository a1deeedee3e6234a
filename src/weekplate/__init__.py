"""
Weekplate weekly dinner-planning package.

The package exposes the resilient fetch layer, the in-memory schedule store, the
artifact populator and the plain-text codecs used to plan a week of dinners with a
generative backend.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
