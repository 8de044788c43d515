# Tests for api/serve.py, the health router and the CLI entry point.
# Created: 2026-10-15

import sys
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from notebookchat.api.serve import create_api_app
from notebookchat.config import get_settings


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", '["http://localhost:3000"]')
    monkeypatch.setenv("GEMINI_API_KEY", "g")
    monkeypatch.setenv("GOOGLE_CLOUD_CLIENT_ID", "client-id")
    monkeypatch.setenv("GOOGLE_CLOUD_CLIENT_SECRET", "client-secret")
    get_settings.cache_clear()
    yield create_api_app()
    get_settings.cache_clear()


@pytest.fixture
def client(app):
    return TestClient(app)


def test_all_routers_mounted(app):
    paths = set(app.openapi()["paths"])
    for path in (
        "/api/v1/auth/login",
        "/api/v1/auth/callback",
        "/api/v1/auth/refresh",
        "/api/v1/auth/logout",
        "/api/v1/auth/status",
        "/api/v1/chat",
        "/api/v1/notebooks",
        "/api/v1/notebooks/{notebook_id}",
        "/api/v1/notebooks/{notebook_id}/sources",
        "/api/v1/notebooks/{notebook_id}/sources/{source_id}",
        "/api/v1/notebooks/{notebook_id}/sources/upload",
        "/api/v1/health",
    ):
        assert path in paths


def test_health(client):
    data = client.get("/api/v1/health").json()
    assert data["status"] == "ok"
    assert data["oauthConfigured"] is True
    assert data["llmProvider"] == "gemini"
    assert data["llmConfigured"] is True
    assert "client-secret" not in str(data)


def test_validation_errors_are_400(client):
    resp = client.post(
        "/api/v1/chat", json={"message": "hi", "chatHistory": [{"role": "system", "content": "x"}]}
    )
    assert resp.status_code == 400
    assert "chatHistory" in resp.json()["detail"]


def test_cors_allows_configured_origin_with_credentials(client):
    resp = client.options(
        "/api/v1/auth/status",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "GET"},
    )
    assert resp.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert resp.headers["access-control-allow-credentials"] == "true"


def test_cors_rejects_unknown_origin(client):
    resp = client.options(
        "/api/v1/auth/status",
        headers={"Origin": "https://evil.example.com", "Access-Control-Request-Method": "GET"},
    )
    assert "access-control-allow-origin" not in resp.headers


class TestMain:
    def test_runs_server_with_args(self, monkeypatch):
        from notebookchat import __main__

        monkeypatch.setattr(sys, "argv", ["notebookchat", "--host", "0.0.0.0", "--port", "9000"])
        with (
            patch.object(__main__, "setup_logging"),
            patch("notebookchat.api.serve.run_api_server") as run,
        ):
            __main__.main()
        run.assert_called_once_with(host="0.0.0.0", port=9000, dev=False)

    def test_version(self, monkeypatch, capsys):
        from notebookchat import __main__

        monkeypatch.setattr(sys, "argv", ["notebookchat", "--version"])
        with pytest.raises(SystemExit) as exc_info:
            __main__.main()
        assert exc_info.value.code == 0
        assert "notebookchat" in capsys.readouterr().out
