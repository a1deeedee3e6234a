"""Tests for by-day schedule updates and stale-write protection."""

from __future__ import annotations

import pytest

from weekplate.models.recipe import InvalidRequestError
from weekplate.models.schedule import (
    DAYS,
    FailedArtifact,
    IdleArtifact,
    LoadingArtifact,
    ReadyArtifact,
    Schedule,
    Slot,
    UnknownDayError,
)
from weekplate.schedule.store import (
    ScheduleStore,
    clear_slot,
    replace_slot,
    set_servings,
    set_title,
)


def test_empty_schedule_has_seven_canonical_days():
    schedule = Schedule.empty()
    assert tuple(slot.label for slot in schedule.slots) == DAYS
    assert all(not slot.is_assigned for slot in schedule.slots)
    assert all(slot.servings == 1 for slot in schedule.slots)


def test_schedule_rejects_out_of_order_days():
    slots = [Slot(label=day) for day in reversed(DAYS)]
    with pytest.raises(ValueError):
        Schedule(slots=tuple(slots))


def test_set_title_updates_only_target_day():
    schedule = Schedule.empty()
    updated = set_title(schedule, "Wednesday", "  Lentil soup ")

    assert updated.slot("Wednesday").title == "Lentil soup"
    assert updated.slot("Wednesday").version == 1
    assert [slot.title for slot in updated.slots if slot.label != "Wednesday"] == [""] * 6
    assert schedule.slot("Wednesday").title == ""


def test_set_title_resets_artifact():
    schedule = set_title(Schedule.empty(), "Monday", "Soup")
    schedule = Schedule(
        slots=(schedule.slots[0].model_copy(update={"artifact": ReadyArtifact(artifact="x")}),)
        + schedule.slots[1:]
    )
    renamed = set_title(schedule, "Monday", "Stew")
    assert renamed.slot("Monday").artifact == IdleArtifact()


@pytest.mark.parametrize("servings", [0, -2, 1.5, True, "3"])
def test_set_servings_rejects_invalid_counts(servings):
    with pytest.raises(InvalidRequestError):
        set_servings(Schedule.empty(), "Friday", servings)


def test_set_servings_keeps_version():
    updated = set_servings(Schedule.empty(), "Friday", 4)
    assert updated.slot("Friday").servings == 4
    assert updated.slot("Friday").version == 0


def test_clear_slot_resets_day():
    schedule = set_servings(set_title(Schedule.empty(), "Sunday", "Roast"), "Sunday", 6)
    cleared = clear_slot(schedule, "Sunday")
    slot = cleared.slot("Sunday")
    assert (slot.title, slot.servings, slot.artifact) == ("", 1, IdleArtifact())


def test_replace_slot_marks_loading_when_refetching():
    schedule = set_title(Schedule.empty(), "Tuesday", "Tacos")
    replaced = replace_slot(schedule, "Tuesday", title="Fajitas", servings=3, refetch=True)
    slot = replaced.slot("Tuesday")
    assert slot.title == "Fajitas"
    assert slot.servings == 3
    assert slot.artifact == LoadingArtifact()
    assert slot.version == 2


def test_unknown_day_raises():
    with pytest.raises(UnknownDayError) as excinfo:
        set_title(Schedule.empty(), "Funday", "Cake")
    assert str(excinfo.value) == "Unknown day 'Funday'"


def test_store_writes_artifact_for_current_version():
    store = ScheduleStore()
    store.apply(lambda schedule: set_title(schedule, "Monday", "Soup"))
    slot = store.schedule.slot("Monday")

    written = store.write_artifact(
        "Monday", ReadyArtifact(artifact="img"), generation=store.generation, version=slot.version
    )

    assert written is True
    assert store.schedule.slot("Monday").artifact == ReadyArtifact(artifact="img")


def test_store_discards_artifact_after_day_edit():
    store = ScheduleStore()
    store.apply(lambda schedule: set_title(schedule, "Monday", "Soup"))
    requested_version = store.schedule.slot("Monday").version
    store.apply(lambda schedule: set_title(schedule, "Monday", "Stew"))

    written = store.write_artifact(
        "Monday",
        ReadyArtifact(artifact="soup-image"),
        generation=store.generation,
        version=requested_version,
    )

    assert written is False
    assert store.schedule.slot("Monday").artifact == IdleArtifact()


def test_store_discards_artifact_from_replaced_plan():
    store = ScheduleStore()
    old_generation = store.generation
    store.replace(set_title(Schedule.empty(), "Monday", "Soup"))

    written = store.write_artifact(
        "Monday",
        FailedArtifact(placeholder="p"),
        generation=old_generation,
        version=0,
    )

    assert written is False
    assert store.generation == old_generation + 1
