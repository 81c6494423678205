"""HTTP tests for the chat API."""
from datetime import datetime
from types import SimpleNamespace

from fastapi.testclient import TestClient
from google.genai import errors

from conftest import StubModel
from gemini import GeminiModel
from main import create_app


class FailingModels:
    def generate_content(self, **kwargs):
        raise errors.ServerError(500, {"error": {"code": 500, "message": "backend down", "status": "INTERNAL"}})


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": True}


class TestChat:
    def test_first_message_scenario(self, client, store):
        resp = client.post("/api/chat", params={"sessionId": "42"}, json={"message": "hello"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["response"]
        datetime.fromisoformat(body["timestamp"])
        assert store.count("42") == 2

    def test_missing_session_id(self, client, stub_model):
        resp = client.post("/api/chat", json={"message": "hello"})

        assert resp.status_code == 400
        assert stub_model.calls == []

    def test_empty_message_rejected(self, client, store):
        resp = client.post("/api/chat", params={"sessionId": "42"}, json={"message": ""})

        assert resp.status_code == 400
        assert store.count("42") == 0

    def test_oversized_message_rejected(self, client, store):
        resp = client.post("/api/chat", params={"sessionId": "42"}, json={"message": "a" * 4001})

        assert resp.status_code == 400
        assert store.count("42") == 0

    def test_missing_body_field_rejected(self, client):
        resp = client.post("/api/chat", params={"sessionId": "42"}, json={"text": "hello"})

        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid request data"

    def test_upstream_failure_scenario(self, settings, store):
        model = GeminiModel(settings, client=SimpleNamespace(models=FailingModels()))
        client = TestClient(create_app(settings=settings, store=store, model=model))

        resp = client.post("/api/chat", params={"sessionId": "42"}, json={"message": "hello"})

        assert resp.status_code == 500
        error_text = resp.json()["detail"]
        assert "500" in error_text
        messages = store.list("42")
        assert messages[-1].is_user is False
        assert messages[-1].content == error_text

    def test_missing_api_key_scenario(self, settings, store):
        settings = settings.model_copy(update={"API_KEY": ""})
        model = GeminiModel(settings, environ={})
        client = TestClient(create_app(settings=settings, store=store, model=model))

        resp = client.post("/api/chat", params={"sessionId": "42"}, json={"message": "hello"})

        assert resp.status_code == 500
        assert "API key" in resp.json()["detail"]
        assert "API key" in store.list("42")[-1].content

    def test_context_window_over_http(self, client, stub_model):
        for i in range(7):
            client.post("/api/chat", params={"sessionId": "42"}, json={"message": f"q{i}"})

        # 14 stored turns precede this call; only the last 10 are sent
        client.post("/api/chat", params={"sessionId": "42"}, json={"message": "last"})
        contents = stub_model.calls[-1]
        assert len(contents) == 12
        assert contents[-1]["parts"][0]["text"] == "last"


class TestMessages:
    def test_lists_messages_in_order(self, client):
        client.post("/api/chat", params={"sessionId": "7"}, json={"message": "hello"})

        resp = client.get("/api/messages", params={"sessionId": "7"})

        assert resp.status_code == 200
        body = resp.json()
        assert [m["isUser"] for m in body] == [True, False]
        assert body[0]["content"] == "hello"
        assert body[0]["id"] < body[1]["id"]

    def test_unknown_or_missing_session_is_empty(self, client):
        assert client.get("/api/messages", params={"sessionId": "unknown"}).json() == []
        assert client.get("/api/messages").json() == []

    def test_history_summary(self, client):
        client.post("/api/chat", params={"sessionId": "7"}, json={"message": "hello"})

        assert client.get("/api/history/7").json() == {"messages": 2}


class TestSessions:
    def test_create_session(self, client, store):
        resp = client.post("/api/sessions")

        assert resp.status_code == 200
        body = resp.json()
        assert set(body) == {"id", "createdAt"}
        assert store.get_session(body["id"]) is not None


class TestReset:
    def test_reset_clears_history(self, client, store):
        client.post("/api/chat", params={"sessionId": "42"}, json={"message": "hello"})

        resp = client.delete("/api/chat/reset", params={"sessionId": "42"})

        assert resp.status_code == 200
        assert resp.json() == {"message": "Chat reset successfully"}
        assert client.get("/api/messages", params={"sessionId": "42"}).json() == []

    def test_reset_unknown_session_is_ok(self, client):
        resp = client.delete("/api/chat/reset", params={"sessionId": "never"})

        assert resp.status_code == 200

    def test_reset_requires_session_id(self, client):
        assert client.delete("/api/chat/reset").status_code == 400


def test_stub_model_records_system_instruction(settings, store):
    model = StubModel()
    client = TestClient(create_app(settings=settings, store=store, model=model))

    client.post("/api/chat", params={"sessionId": "1"}, json={"message": "hi"})

    assert model.calls[0][0]["role"] == "model"
    assert model.calls[0][0]["parts"][0]["text"] == "You are a test assistant."


def test_configured_length_limit_applies_over_http(settings, store):
    settings = settings.model_copy(update={"MAX_MESSAGE_LENGTH": 5000})
    client = TestClient(create_app(settings=settings, store=store, model=StubModel()))

    accepted = client.post("/api/chat", params={"sessionId": "9"}, json={"message": "a" * 4500})
    rejected = client.post("/api/chat", params={"sessionId": "9"}, json={"message": "a" * 5001})

    assert accepted.status_code == 200
    assert rejected.status_code == 400
    assert store.count("9") == 2
