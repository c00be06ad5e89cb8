"""Tests for the bundled app: status endpoint and its request log."""
import logging

import pytest
from fastapi.testclient import TestClient

from requestlog.core.config import Settings
from requestlog.main import create_app


def _settings(monkeypatch, project_id="demo-project", trust_proxy="true"):
    for name in ("GOOGLE_CLOUD_PROJECT", "GCP_PROJECT", "PROJECT_ID"):
        monkeypatch.delenv(name, raising=False)
    if project_id:
        monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", project_id)
    monkeypatch.setenv("TRUST_PROXY", trust_proxy)
    return Settings(_env_file=None)


@pytest.fixture
def client(monkeypatch):
    return TestClient(create_app(_settings(monkeypatch)))


def _request_records(caplog):
    return [r for r in caplog.records if r.name == "requestlog.request"]


class TestHealthStatus:
    """Tests for GET /health."""

    def test_reports_logging_configuration(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "project_id": "demo-project",
            "trace_enabled": True,
            "trust_proxy": True,
        }

    def test_trace_disabled_without_project(self, monkeypatch):
        client = TestClient(create_app(_settings(monkeypatch, project_id="", trust_proxy="false")))

        data = client.get("/health").json()

        assert data["project_id"] == ""
        assert data["trace_enabled"] is False
        assert data["trust_proxy"] is False


class TestAppRequestLog:
    """The app logs every request on the requestlog.request logger."""

    def test_health_request_logged(self, client, caplog):
        caplog.set_level(logging.INFO, logger="requestlog.request")

        response = client.get(
            "/health",
            headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1", "X-Cloud-Trace-Context": "abc/1;o=1"},
        )

        records = _request_records(caplog)
        assert len(records) == 1
        http_request = records[0].httpRequest
        assert http_request["requestMethod"] == "GET"
        assert http_request["requestUrl"] == "/health"
        assert http_request["status"] == 200
        assert http_request["responseSize"] == len(response.content)
        assert http_request["remoteIp"] == "203.0.113.9"
        assert getattr(records[0], "logging.googleapis.com/trace") == "projects/demo-project/traces/abc"

    def test_peer_address_used_without_proxy_trust(self, monkeypatch, caplog):
        caplog.set_level(logging.INFO, logger="requestlog.request")
        client = TestClient(create_app(_settings(monkeypatch, trust_proxy="false")))

        client.get("/health", headers={"X-Forwarded-For": "203.0.113.9"})

        assert _request_records(caplog)[0].httpRequest["remoteIp"] == "testclient"

    def test_unknown_route_logged_as_warning(self, client, caplog):
        caplog.set_level(logging.INFO, logger="requestlog.request")

        client.get("/nope")

        records = _request_records(caplog)
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert records[0].httpRequest["status"] == 404
