# Tests for API v1 chat router.
# Created: 2026-10-14

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from notebookchat.api.deps import get_completion_service, get_notebook_client
from notebookchat.api.v1.chat import router
from notebookchat.config import Settings, get_settings
from notebookchat.integrations.notebooklm import NotebookLMClient

BASE = "https://us-discoveryengine.googleapis.com/v1alpha/projects/123/locations/us/notebooks"


class RecordingCompletion:
    def __init__(self, answer="Here is what your sources say."):
        self.answer = answer
        self.calls: list[tuple] = []

    async def complete(self, system_instruction, history, prompt):
        self.calls.append((system_instruction, history, prompt))
        return self.answer


def upstream(request: httpx.Request) -> httpx.Response:
    url = str(request.url)
    if url == f"{BASE}/n1":
        return httpx.Response(200, json={"notebookId": "n1", "title": "Research", "sources": []})
    if url == f"{BASE}/n1/sources":
        return httpx.Response(
            200,
            json={
                "sources": [
                    {"sourceId": {"id": "s1"}, "title": "Doc One", "metadata": {"wordCount": 100}},
                    {"sourceId": {"id": "s2"}, "title": "Doc Two"},
                ]
            },
        )
    return httpx.Response(404, json={"error": {"message": "Notebook not found"}})


@pytest.fixture
def settings():
    return Settings(_env_file=None, google_cloud_project_number=None, history_limit=10)


@pytest.fixture
def requests_seen():
    return []


@pytest.fixture
def completion():
    return RecordingCompletion()


@pytest.fixture
def test_app(settings, completion, requests_seen):
    def _recording(request):
        requests_seen.append(str(request.url))
        return upstream(request)

    broker = MagicMock()
    broker.resolve_access_token = AsyncMock(return_value="tok")

    app = FastAPI()
    app.include_router(router, prefix="/api/v1")
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_notebook_client] = lambda: NotebookLMClient(
        broker, transport=httpx.MockTransport(_recording)
    )
    app.dependency_overrides[get_completion_service] = lambda: completion
    return app


@pytest.fixture
def client(test_app):
    return TestClient(test_app)


def test_chat_end_to_end_with_listed_sources(client, completion):
    resp = client.post(
        "/api/v1/chat",
        json={
            "message": "Summarize my sources",
            "notebookIds": ["n1"],
            "projectNumber": "123",
            "chatHistory": [],
        },
    )

    assert resp.status_code == 200
    assert resp.json() == {"response": "Here is what your sources say."}

    prompt = completion.calls[0][2]
    # Once in the notebook section, once in the summary
    assert prompt.count('"Doc One"') == 2
    assert prompt.count('"Doc Two"') == 2
    assert '=== Notebook 1: "Research" ===' in prompt
    assert "This notebook contains 2 sources:" in prompt
    assert '1. "Doc One" (100 words)' in prompt
    assert prompt.endswith("User question: Summarize my sources")


def test_chat_with_missing_notebook_still_answers(client, completion):
    resp = client.post(
        "/api/v1/chat",
        json={"message": "hi", "notebookIds": ["n1", "gone"], "projectNumber": "123"},
    )
    assert resp.status_code == 200

    prompt = completion.calls[0][2]
    assert '=== Notebook 1: "Research" ===' in prompt
    assert '=== Notebook 2: "Notebook gone" ===' in prompt


def test_chat_without_project_skips_notebooks(client, completion, requests_seen):
    resp = client.post("/api/v1/chat", json={"message": "hi", "notebookIds": ["n1"]})
    assert resp.status_code == 200
    assert requests_seen == []
    assert completion.calls[0][2] == "hi"


def test_chat_project_from_settings(client, settings, completion, requests_seen):
    settings.google_cloud_project_number = "123"
    client.post("/api/v1/chat", json={"message": "hi", "notebookIds": ["n1"]})
    assert f"{BASE}/n1" in requests_seen


def test_chat_history_is_truncated(client, completion):
    history = [
        {"role": "user" if i % 2 == 0 else "assistant", "content": f"turn {i}"} for i in range(15)
    ]
    client.post("/api/v1/chat", json={"message": "hi", "chatHistory": history})

    sent = completion.calls[0][1]
    assert [t.content for t in sent] == [f"turn {i}" for i in range(5, 15)]
    # turn 5 is odd, so the kept window starts on an assistant turn
    assert [t.role for t in sent] == ["assistant" if i % 2 else "user" for i in range(5, 15)]


@pytest.mark.parametrize("body", [{}, {"message": ""}, {"message": "   "}])
def test_chat_requires_message(client, body):
    resp = client.post("/api/v1/chat", json=body)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Message is required"


def test_chat_completion_failure(client, completion):
    completion.complete = AsyncMock(side_effect=RuntimeError("upstream model down"))
    resp = client.post("/api/v1/chat", json={"message": "hi"})

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to process chat message"
    assert "upstream model down" not in resp.text
