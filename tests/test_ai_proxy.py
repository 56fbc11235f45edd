import json

import pytest
import requests
from fastapi.testclient import TestClient

from pma.api import PmaSettings, create_app
from pma.api.ai import AiSettings
from pma.api.routers import ai as ai_router


class FakeUpstream:
    def __init__(self, status_code=200, content=b"", chunks=()):
        self.status_code = status_code
        self.content = content
        self.chunks = list(chunks)
        self.closed = False

    @property
    def ok(self):
        return self.status_code < 400

    @property
    def text(self):
        return self.content.decode("utf-8")

    def iter_content(self, chunk_size=1):
        yield from self.chunks

    def close(self):
        self.closed = True


@pytest.fixture()
def client():
    settings = PmaSettings(database_url="sqlite+pysqlite:///:memory:")
    ai_settings = AiSettings(
        ollama_base_url="http://ollama.test",
        ollama_api_key="secret",
        n8n_webhook_url="http://n8n.test/webhook",
    )
    return TestClient(create_app(settings, ai_settings))


def test_models_are_passed_through(client, monkeypatch):
    calls = {}

    def fake_get(url, headers=None, timeout=None):
        calls.update(url=url, headers=headers)
        return FakeUpstream(content=b'{"models": [{"name": "llama3.1:8b"}]}')

    monkeypatch.setattr(ai_router.requests, "get", fake_get)

    response = client.get("/api/ai/models")

    assert response.status_code == 200
    assert response.json() == {"models": [{"name": "llama3.1:8b"}]}
    assert calls["url"] == "http://ollama.test/api/tags"
    assert calls["headers"] == {"Authorization": "Bearer secret"}


def test_models_upstream_failure(client, monkeypatch):
    monkeypatch.setattr(ai_router.requests, "get", lambda *a, **kw: FakeUpstream(status_code=502))

    response = client.get("/api/ai/models")

    assert response.status_code == 502
    assert response.json() == {"error": "Failed to fetch models from Ollama"}


def test_unreachable_ollama_is_503(client, monkeypatch):
    def refuse(*args, **kwargs):
        raise requests.exceptions.ConnectionError("refused")

    monkeypatch.setattr(ai_router.requests, "get", refuse)
    monkeypatch.setattr(ai_router.requests, "post", refuse)

    models = client.get("/api/ai/models")
    chat = client.post("/api/ai/chat", json={"messages": [{"role": "user", "content": "hi"}]})

    assert models.status_code == 503
    assert chat.status_code == 503
    assert chat.json() == {"error": ai_router.CONNECT_ERROR_MESSAGE}


def test_chat_streams_upstream_chunks(client, monkeypatch):
    upstream = FakeUpstream(chunks=[b"data: one\n\n", b"", b"data: two\n\n"])
    sent = {}

    def fake_post(url, json=None, headers=None, stream=False, timeout=None):
        sent.update(url=url, json=json, stream=stream)
        return upstream

    monkeypatch.setattr(ai_router.requests, "post", fake_post)

    response = client.post(
        "/api/ai/chat",
        json={"messages": [{"role": "user", "content": "hi"}], "maxTokens": 50},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["x-accel-buffering"] == "no"
    assert response.content == b"data: one\n\ndata: two\n\n"
    assert upstream.closed is True
    assert sent["url"] == "http://ollama.test/api/chat/completions"
    assert sent["stream"] is True
    assert sent["json"]["model"] == "llama3.1:8b"
    assert sent["json"]["max_tokens"] == 50
    assert sent["json"]["temperature"] == 0.5


def test_chat_upstream_error_detail_is_forwarded(client, monkeypatch):
    upstream = FakeUpstream(status_code=401, content=json.dumps({"detail": "bad key"}).encode())
    monkeypatch.setattr(ai_router.requests, "post", lambda *a, **kw: upstream)

    response = client.post("/api/ai/chat", json={"messages": []})

    assert response.status_code == 401
    assert response.json() == {"error": "bad key"}
    assert "www-authenticate" not in response.headers
    assert upstream.closed is True


def test_save_memory_always_succeeds(client, monkeypatch):
    posted = {}

    def fake_post(url, json=None, timeout=None):
        posted.update(url=url, json=json)
        return FakeUpstream(status_code=500)

    monkeypatch.setattr(ai_router.requests, "post", fake_post)

    response = client.post(
        "/api/ai/save-memory",
        json={"context": "c", "response": "r", "sessionId": "s-1", "previousValues": {"a": "b"}},
    )

    assert response.json() == {"success": True}
    assert posted["url"] == "http://n8n.test/webhook"
    assert posted["json"]["sessionId"] == "s-1"
    assert posted["json"]["saveToMemory"] is True


def test_save_memory_ignores_transport_errors(client, monkeypatch):
    def timeout(*args, **kwargs):
        raise requests.exceptions.Timeout("slow")

    monkeypatch.setattr(ai_router.requests, "post", timeout)

    response = client.post("/api/ai/save-memory", json={})

    assert response.status_code == 200
    assert response.json() == {"success": True}
