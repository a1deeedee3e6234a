"""Text parsers for generated content."""

from .shopping_list import DEFAULT_CATEGORY, parse_shopping_list, render_shopping_list

__all__ = ["DEFAULT_CATEGORY", "parse_shopping_list", "render_shopping_list"]
