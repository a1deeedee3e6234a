"""Shared pytest fixtures for the Weekplate test suite."""

from __future__ import annotations

from typing import Generator, Optional, Sequence

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from weekplate.artifacts.populator import ArtifactPopulator
from weekplate.config import get_settings
from weekplate.fetch.retry import RetryPolicy
from weekplate.models.recipe import DetailRecord, PlanPreferences, RawPlanEntry
from weekplate.models.schedule import DAYS, Slot
from weekplate.planner.session import PlannerSession
from weekplate.server.app import create_app

SAMPLE_TITLES = {
    "Monday": "Salmon with roasted vegetables",
    "Tuesday": "Chicken stir-fry",
    "Wednesday": "Lentil soup",
    "Thursday": "Beef tacos",
    "Friday": "Margherita pizza",
    "Saturday": "Mushroom risotto",
    "Sunday": "Roast chicken",
}


class FakeSleep:
    """Record requested delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeBackend:
    """In-memory generative backend with scripted responses."""

    def __init__(self) -> None:
        self.plan = [RawPlanEntry(day=day, title=title) for day, title in SAMPLE_TITLES.items()]
        self.regenerated_title = "Vegetable curry"
        self.details = DetailRecord(
            ingredients=["2 salmon fillets", "300 g broccoli"],
            instructions="1. Roast.\n2. Serve.",
            calories="450 kcal",
        )
        self.customized = DetailRecord(
            ingredients=["400 g tofu"],
            instructions="1. Fry tofu.",
            calories="380 kcal",
            new_title="Tofu stir-fry",
        )
        self.shopping_markdown = "## Produce\n- 1 head broccoli\n## Dairy\n- 200 ml cream"
        self.failing_images: set[str] = set()
        self.error: Optional[Exception] = None
        self.calls: list[tuple] = []

    def _maybe_fail(self) -> None:
        if self.error is not None:
            raise self.error

    async def generate_plan(self, prefs: PlanPreferences) -> list[RawPlanEntry]:
        self.calls.append(("generate_plan", prefs))
        self._maybe_fail()
        return list(self.plan)

    async def regenerate_dinner(self, day: str, servings: int, prefs: PlanPreferences) -> str:
        self.calls.append(("regenerate_dinner", day, servings))
        self._maybe_fail()
        return self.regenerated_title

    async def fetch_details(self, title: str, servings: int) -> DetailRecord:
        self.calls.append(("fetch_details", title, servings))
        self._maybe_fail()
        return self.details

    async def customize_details(self, title: str, servings: int, substitutions: str) -> DetailRecord:
        self.calls.append(("customize_details", title, servings, substitutions))
        self._maybe_fail()
        return self.customized

    async def generate_shopping_list(self, slots: Sequence[Slot], prefs: PlanPreferences) -> str:
        self.calls.append(("generate_shopping_list", [slot.label for slot in slots]))
        self._maybe_fail()
        return self.shopping_markdown

    async def fetch_dish_image(self, title: str) -> str:
        self.calls.append(("fetch_dish_image", title))
        if title in self.failing_images:
            raise RuntimeError(f"quota exceeded for {title}")
        return f"data:image/png;base64,{title.replace(' ', '-')}"


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Run each test with default settings and no .env files."""

    monkeypatch.chdir(tmp_path)
    for key in (
        "GEMINI_API_KEY",
        "WEEKPLATE_GEMINI_API_KEY",
        "WEEKPLATE_API_TOKEN",
        "WEEKPLATE_IMAGE_RETRY_ATTEMPTS",
        "WEEKPLATE_IMAGE_RETRY_DELAY",
        "WEEKPLATE_LOG_FORMAT",
    ):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture()
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def session(fake_backend, fake_sleep) -> PlannerSession:
    """Planning session over the fake backend with instant image retries."""

    populator = ArtifactPopulator(policy=RetryPolicy(max_attempts=3, delay=2.0), sleep=fake_sleep)
    return PlannerSession(backend=fake_backend, populator=populator)


@pytest.fixture()
def app(session) -> Generator[FastAPI, None, None]:
    """Create a new FastAPI app instance for each test and reset overrides."""

    application = create_app(session=session)
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> TestClient:
    """Return a test client bound to the FastAPI app."""

    return TestClient(app)


@pytest.fixture()
def sample_plan_text() -> str:
    return "\n".join(f"{day}: {SAMPLE_TITLES[day]} (Serves 2)" for day in DAYS)
