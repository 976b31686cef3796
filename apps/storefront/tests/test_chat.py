import requests
from fastapi.testclient import TestClient

from storefront.core import llm_adapter
from storefront.core.dataset import Product
from storefront.core.llm_adapter import HISTORY_LIMIT, build_messages
from storefront.core.prompts import build_system_prompt
from storefront.main import app


client = TestClient(app)


class _FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    @property
    def text(self):
        return str(self._body)

    def json(self):
        return self._body


def _capture_post(monkeypatch, response):
    calls = []

    def fake_post(url, headers=None, json=None, timeout=None):
        calls.append({"url": url, "headers": headers, "json": json})
        return response

    monkeypatch.setattr(llm_adapter.requests, "post", fake_post)
    return calls


def test_system_prompt_lists_products():
    product = Product(
        id="p1",
        name="Linen Kurta",
        price="₹1,999",
        image_url="img.png",
        category="Kurta",
        collection="Daily Wear",
        description="Breathable.",
    )
    prompt = build_system_prompt([product])
    assert "- Linen Kurta (Daily Wear): ₹1,999, Kurta. Breathable." in prompt
    assert "Fusion Website AI Assistant" in prompt


def test_build_messages_keeps_last_history_entries():
    history = [{"role": "user", "content": str(i)} for i in range(15)]
    messages = build_messages("system", "hello", history)
    assert messages[0] == {"role": "system", "content": "system"}
    assert messages[-1] == {"role": "user", "content": "hello"}
    assert [m["content"] for m in messages[1:-1]] == [str(i) for i in range(5, 15)]
    assert len(messages) == HISTORY_LIMIT + 2


def test_chat_requires_message(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "test-key")
    r = client.post("/api/chat", json={"history": []})
    assert r.status_code == 400
    assert r.json() == {"error": "Message is required"}


def test_chat_without_credential_fails_closed(monkeypatch):
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    calls = _capture_post(monkeypatch, _FakeResponse(200, {}))
    r = client.post("/api/chat", json={"message": "What is your return policy?"})
    assert r.status_code == 500
    assert r.json() == {"error": "API key not configured"}
    assert calls == []


def test_chat_forwards_reply(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "test-key")
    body = {"model": "llama-3.3-70b-versatile", "choices": [{"message": {"content": "14 days."}}]}
    calls = _capture_post(monkeypatch, _FakeResponse(200, body))
    history = [{"role": "assistant", "content": str(i)} for i in range(12)]
    r = client.post("/api/chat", json={"message": "Returns?", "history": history})
    assert r.status_code == 200
    assert r.json() == {"message": "14 days.", "model": "llama-3.3-70b-versatile"}

    sent = calls[0]
    assert sent["headers"]["Authorization"] == "Bearer test-key"
    assert sent["json"]["max_tokens"] == 500
    messages = sent["json"]["messages"]
    assert messages[0]["role"] == "system"
    assert len(messages) == 12
    assert messages[-1] == {"role": "user", "content": "Returns?"}


def test_chat_empty_choice_uses_fallback(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "test-key")
    _capture_post(monkeypatch, _FakeResponse(200, {"model": "m", "choices": []}))
    r = client.post("/api/chat", json={"message": "hi"})
    assert r.json()["message"] == llm_adapter.FALLBACK_REPLY


def test_chat_forwards_upstream_error(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "test-key")
    upstream = {"error": {"message": "rate limited"}}
    _capture_post(monkeypatch, _FakeResponse(429, upstream))
    r = client.post("/api/chat", json={"message": "hi"})
    assert r.status_code == 429
    assert r.json() == {"error": "Failed to get response from AI", "details": upstream}


def test_chat_network_failure_is_internal_error(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "test-key")

    def boom(*args, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(llm_adapter.requests, "post", boom)
    r = client.post("/api/chat", json={"message": "hi"})
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error"}


def test_health_reports_timestamp():
    r = client.get("/api/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["timestamp"]


def test_chat_malformed_choices_use_fallback(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "test-key")
    monkeypatch.delenv("GROQ_MODEL", raising=False)
    for body in ({"choices": "oops"}, {"choices": ["oops"]}, {"choices": [{"message": "text"}]}, ["not", "a", "dict"]):
        _capture_post(monkeypatch, _FakeResponse(200, body))
        r = client.post("/api/chat", json={"message": "hi"})
        assert r.status_code == 200
        assert r.json() == {"message": llm_adapter.FALLBACK_REPLY, "model": llm_adapter.DEFAULT_MODEL}


def test_chat_invalid_timeout_falls_back_to_default(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "test-key")
    monkeypatch.setenv("GROQ_TIMEOUT", "abc")
    body = {"model": "m", "choices": [{"message": {"content": "ok"}}]}
    seen = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        seen["timeout"] = timeout
        return _FakeResponse(200, body)

    monkeypatch.setattr(llm_adapter.requests, "post", fake_post)
    r = client.post("/api/chat", json={"message": "hi"})
    assert r.status_code == 200
    assert r.json()["message"] == "ok"
    assert seen["timeout"] == llm_adapter.DEFAULT_TIMEOUT


def test_chat_unexpected_error_is_structured_500(monkeypatch):
    from storefront.routers import chat as chat_router

    def broken(messages):
        raise KeyError("choices")

    monkeypatch.setattr(chat_router, "complete_chat", broken)
    lenient = TestClient(app, raise_server_exceptions=False)
    r = lenient.post("/api/chat", json={"message": "hi"})
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error"}
