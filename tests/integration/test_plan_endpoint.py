"""Integration tests for the weekly plan endpoints."""

from __future__ import annotations

from fastapi import status

from weekplate.fetch.retry import ExhaustedRetries
from weekplate.models.schedule import DAYS
from weekplate.planner.session import PlannerSession
from weekplate.server import deps


def _generate(client) -> dict:
    response = client.post("/plan", json={"dietary_preferences": "vegetarian"})
    assert response.status_code == status.HTTP_200_OK
    return response.json()


def test_get_plan_starts_empty(client):
    body = client.get("/plan").json()

    assert body["generation"] == 0
    assert [slot["label"] for slot in body["slots"]] == list(DAYS)
    assert all(slot["title"] == "" for slot in body["slots"])


def test_generate_plan_populates_images_in_background(client, fake_backend):
    body = _generate(client)

    assert body["generation"] == 1
    assert body["slots"][0]["title"] == "Salmon with roasted vegetables"

    slots = client.get("/plan").json()["slots"]
    assert all(slot["artifact"]["status"] == "ready" for slot in slots)
    assert fake_backend.calls[0][1].dietary_preferences == "vegetarian"


def test_generate_rejects_missing_facilities(client):
    response = client.post("/plan", json={"limited_facilities": True, "facilities": []})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "cooking facility" in response.json()["detail"]


def test_generate_reports_backend_exhaustion(client, fake_backend):
    fake_backend.error = ExhaustedRetries("meal plan", 1, "HTTP status 500", "boom")

    response = client.post("/plan", json={})

    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    assert "meal plan failed after 1 attempt(s)" in response.json()["detail"]


def test_generate_without_backend_is_unavailable(client, app):
    app.dependency_overrides[deps.get_session] = lambda: PlannerSession()

    response = client.post("/plan", json={})

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE


def test_import_and_export_round_trip(client, sample_plan_text):
    response = client.post("/plan/import", json={"text": sample_plan_text})
    assert response.status_code == status.HTTP_200_OK

    exported = client.get("/plan/export")
    assert exported.status_code == status.HTTP_200_OK
    assert exported.headers["content-type"].startswith("text/plain")
    assert exported.text == sample_plan_text


def test_import_error_reports_line(client):
    response = client.post(
        "/plan/import",
        json={"text": "Monday: Soup (Serves 2)\nTuesday soup"},
    )

    assert response.status_code == 422
    body = response.json()
    assert body["line"] == 2
    assert body["detail"].startswith("Import failed: line 2 does not match")


def test_patch_day_updates_title_and_servings(client):
    _generate(client)

    response = client.patch("/plan/thursday", json={"title": "Fish tacos", "servings": 3})

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["title"] == "Fish tacos"
    assert response.json()["servings"] == 3
    thursday = client.get("/plan").json()["slots"][3]
    assert thursday["artifact"] == {"status": "ready", "artifact": "data:image/png;base64,Fish-tacos"}


def test_patch_day_rejects_zero_servings(client):
    response = client.patch("/plan/Monday", json={"servings": 0})

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_unknown_day_is_not_found(client):
    response = client.delete("/plan/Funday")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Unknown day 'Funday'"


def test_clear_day(client):
    _generate(client)

    response = client.delete("/plan/Sunday")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["title"] == ""


def test_regenerate_day(client):
    _generate(client)

    response = client.post("/plan/Tuesday/regenerate")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["title"] == "Vegetable curry"
    tuesday = client.get("/plan").json()["slots"][1]
    assert tuesday["artifact"]["status"] == "ready"


def test_details_and_customize(client):
    _generate(client)

    details = client.get("/plan/Monday/details")
    assert details.status_code == status.HTTP_200_OK
    assert details.json()["calories"] == "450 kcal"

    customized = client.post(
        "/plan/Tuesday/customize",
        json={"servings": 4, "substitutions": "tofu instead of chicken"},
    )
    assert customized.status_code == status.HTTP_200_OK
    assert customized.json()["newMealName"] == "Tofu stir-fry"

    plan = client.get("/plan").json()
    assert plan["slots"][1]["title"] == "Tofu stir-fry"
    assert plan["details"]["Tuesday"]["status"] == "ready"


def test_details_for_empty_day_is_bad_request(client):
    response = client.get("/plan/Monday/details")

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_import_with_oversized_servings_is_rejected(client):
    response = client.post(
        "/plan/import",
        json={"text": "Monday: Salmon (Serves " + "9" * 5000 + ")"},
    )

    assert response.status_code == 422
    assert response.json()["line"] == 1
