# -*- coding: utf-8 -*-
"""
backend/tests/test_health_routes.py

Health check del backend (/health, /health/live) y endpoint raíz.
"""

import pytest
from fastapi.testclient import TestClient

import app.routes.health_routes as health_routes
from app.main import create_app


@pytest.fixture
def client():
    return TestClient(create_app())


def _fake_db(ok: bool):
    async def _check(timeout_s: float = 3.0, sql: str = "SELECT 1") -> bool:
        return ok
    return _check


class TestHealth:
    def test_health_ok(self, client, monkeypatch):
        monkeypatch.setattr(health_routes, "check_database_health", _fake_db(True))

        body = client.get("/health").json()

        assert body["status"] == "ok"
        assert body["environment"] == "test"
        assert body["database"] == {"reachable": True}
        assert body["auth"]["flags"] == {"legacyMigration": False, "modernAuth": False}
        assert body["timestamp"].endswith("Z")

    def test_health_degraded(self, client, monkeypatch):
        monkeypatch.setattr(health_routes, "check_database_health", _fake_db(False))

        body = client.get("/health").json()

        assert body["status"] == "degraded"
        assert body["database"]["reachable"] is False

    def test_live(self, client):
        assert client.get("/health/live").json() == {"live": True}

    def test_root(self, client):
        assert client.get("/").json()["status"] == "active"

    def test_prometheus_scrape(self, client):
        client.get("/health/live")
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "http_requests_total" in response.text
        assert 'path="/health/live"' in response.text

# Fin del archivo backend/tests/test_health_routes.py
