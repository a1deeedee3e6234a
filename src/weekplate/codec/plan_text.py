"""Plain-text export and import of the weekly plan.

One line per assigned day::

    Monday: Salmon with roasted vegetables (Serves 2)

Import is all-or-nothing: the first structural problem raises :class:`PlanImportError`
and nothing is returned. Days absent from a partial plan come back empty, serving one.
A day that appears twice is rejected rather than silently overwritten.
"""

from __future__ import annotations

import re
from typing import Optional

from weekplate.models.schedule import DAYS, Schedule, Slot

_LINE_RE = re.compile(r"^([A-Za-z]+):\s*(.+?)\s*\(Serves\s*(\d+)\)$")
_PARENTHETICAL_RE = re.compile(r"\s*\(.*?\)\s*")
_QUANTITY_RE = re.compile(
    r"\s*\d+(?:\.\d+)?\s*(?:g|kg|ml|l|oz|lb|cup|cups|tbsp|tsp|pieces|slices|units|servings)\b",
    re.IGNORECASE,
)
_WHITESPACE_RE = re.compile(r"\s+")

EXPECTED_FORMAT = "Day: Meal (Serves X)"


class PlanImportError(ValueError):
    """Raised when plan text cannot be imported; ``line`` is 1-based when known."""

    def __init__(self, message: str, *, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.line = line
        self.reason = message


def clean_title(title: str) -> str:
    """Strip parenthetical asides and quantity tokens for display.

    ``"Steak 200g (with chips)"`` becomes ``"Steak"``. Export keeps the raw title.
    """

    cleaned = _PARENTHETICAL_RE.sub(" ", title)
    cleaned = _QUANTITY_RE.sub("", cleaned)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def _single_line(title: str) -> str:
    return _WHITESPACE_RE.sub(" ", title).strip()


def encode(schedule: Schedule) -> str:
    return "\n".join(
        f"{slot.label}: {_single_line(slot.title)} (Serves {slot.servings})"
        for slot in schedule.assigned()
    )


def decode(text: str) -> Schedule:
    lines = [line.strip() for line in (text or "").splitlines() if line.strip()]
    if not lines:
        raise PlanImportError("no plan text provided")

    entries: list[tuple[int, str, str, int]] = []
    for number, line in enumerate(lines, start=1):
        match = _LINE_RE.match(line)
        if not match:
            raise PlanImportError(
                f"line {number} does not match expected format '{EXPECTED_FORMAT}'",
                line=number,
            )
        label, title, raw_count = match.group(1), match.group(2).strip(), match.group(3)
        try:
            count = int(raw_count)
        except ValueError:
            # Past the interpreter's integer digit limit.
            count = 0
        if label not in DAYS or count < 1:
            raise PlanImportError(
                f"line {number} has invalid day or servings; expected '{EXPECTED_FORMAT}'",
                line=number,
            )
        entries.append((number, label, title, count))

    if len(entries) > len(DAYS):
        raise PlanImportError(f"expected {len(DAYS)} days, found {len(entries)}")

    by_label: dict[str, tuple[str, int]] = {}
    for number, label, title, count in entries:
        if label in by_label:
            raise PlanImportError(
                f"days missing or out of order: line {number} repeats {label}",
                line=number,
            )
        by_label[label] = (title, count)

    if len(entries) == len(DAYS):
        order = [label for _, label, _, _ in entries]
        if order != list(DAYS):
            raise PlanImportError("days missing or out of order")

    slots = []
    for day in DAYS:
        if day in by_label:
            title, count = by_label[day]
            slots.append(Slot(label=day, title=title, servings=count))
        else:
            slots.append(Slot(label=day))
    return Schedule(slots=tuple(slots))


__all__ = ["EXPECTED_FORMAT", "PlanImportError", "clean_title", "decode", "encode"]
