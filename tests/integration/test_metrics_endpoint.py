"""Integration tests for metrics endpoint."""

from __future__ import annotations


def test_metrics_endpoint_available(client):
    client.get("/plan")
    response = client.get("/metrics")
    assert response.status_code == 200
    body = response.content.decode()
    assert "weekplate_http_requests_total" in body


def test_image_fetch_outcomes_are_counted(client):
    client.post("/plan", json={})
    body = client.get("/metrics").content.decode()
    assert 'weekplate_artifact_fetches_total{status="ready"}' in body
    assert 'weekplate_fetch_attempts_total{outcome="success"}' in body
