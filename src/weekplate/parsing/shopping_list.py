"""Parse markdown-style shopping lists into ordered categories."""

from __future__ import annotations

import re
from typing import Mapping, Sequence

DEFAULT_CATEGORY = "Miscellaneous"

# Only a `json` tag is dropped; any other text after the fence is content
# (a `markdown` tag is removed by _LEADING_MARKDOWN_RE).
_FENCE_RE = re.compile(r"^```(?:json)?(.*?)```$", re.DOTALL)
_LEADING_MARKDOWN_RE = re.compile(r'^"?markdown\n')
_TRAILING_MARKDOWN_RE = re.compile(r'\nmarkdown"?$')

_HEADING_PREFIX = "## "
_BULLET_PREFIX = "- "


def _strip_wrappers(text: str) -> str:
    cleaned = text.strip()
    match = _FENCE_RE.match(cleaned)
    if match:
        cleaned = match.group(1).strip()
    if len(cleaned) >= 2 and cleaned.startswith('"') and cleaned.endswith('"'):
        cleaned = cleaned[1:-1].strip()
    cleaned = _LEADING_MARKDOWN_RE.sub("", cleaned)
    cleaned = _TRAILING_MARKDOWN_RE.sub("", cleaned)
    return cleaned.strip()


def parse_shopping_list(text: str) -> dict[str, list[str]]:
    """Group ``## Category`` / ``- item`` lines into an ordered category map.

    Lines that are neither headings nor bullets are kept as items of the current
    category, which starts out as ``Miscellaneous``. Headings without any items are
    dropped. Item text, including quantities, is kept verbatim and never deduplicated.
    """

    categories: dict[str, list[str]] = {}
    current = DEFAULT_CATEGORY

    lines = [line.strip() for line in _strip_wrappers(text or "").splitlines()]
    for line in lines:
        if not line:
            continue
        if line.startswith(_HEADING_PREFIX):
            current = line[len(_HEADING_PREFIX):].strip()
            categories.setdefault(current, [])
        elif line.startswith(_BULLET_PREFIX):
            categories.setdefault(current, []).append(line[len(_BULLET_PREFIX):].strip())
        else:
            categories.setdefault(current, []).append(line)

    return {name: items for name, items in categories.items() if items}


def render_shopping_list(categories: Mapping[str, Sequence[str]]) -> str:
    """Render categories back to the markdown form accepted by :func:`parse_shopping_list`."""

    lines: list[str] = []
    for name, items in categories.items():
        if not items:
            continue
        lines.append(f"{_HEADING_PREFIX}{name}")
        lines.extend(f"{_BULLET_PREFIX}{item}" for item in items)
        lines.append("")
    return "\n".join(lines).strip()


__all__ = ["DEFAULT_CATEGORY", "parse_shopping_list", "render_shopping_list"]
