"""Security-related integration tests."""

from __future__ import annotations

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from weekplate.config import get_settings
from weekplate.server.app import create_app


@pytest.fixture()
def secure_client(monkeypatch, session) -> TestClient:
    monkeypatch.setenv("WEEKPLATE_API_TOKEN", "secret-token")
    get_settings.cache_clear()
    app = create_app(session=session)
    client = TestClient(app)
    yield client
    monkeypatch.delenv("WEEKPLATE_API_TOKEN", raising=False)
    get_settings.cache_clear()


def test_generate_requires_api_token(secure_client):
    response = secure_client.post("/plan", json={})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

    response = secure_client.post(
        "/plan", json={}, headers={"Authorization": "Bearer secret-token"}
    )
    assert response.status_code == status.HTTP_200_OK


@pytest.mark.parametrize(
    ("headers", "params"),
    [
        ({"X-API-Key": "secret-token"}, {}),
        ({}, {"api_token": "secret-token"}),
    ],
)
def test_alternative_token_locations(secure_client, headers, params):
    response = secure_client.post(
        "/plan/import",
        json={"text": "Monday: Soup (Serves 2)"},
        headers=headers,
        params=params,
    )
    assert response.status_code == status.HTTP_200_OK


def test_wrong_token_is_rejected(secure_client):
    response = secure_client.delete("/plan/Monday", headers={"Authorization": "Bearer nope"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_reads_do_not_require_token(secure_client):
    assert secure_client.get("/plan").status_code == status.HTTP_200_OK
    assert secure_client.get("/plan/export").status_code == status.HTTP_200_OK
