from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import requests

GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"
DEFAULT_MODEL = "llama-3.3-70b-versatile"
HISTORY_LIMIT = 10
DEFAULT_TIMEOUT = 30.0
FALLBACK_REPLY = "Sorry, I couldn't generate a response."

logger = logging.getLogger(__name__)


class ChatProxyError(Exception):
    """An upstream or configuration failure, carried back to the HTTP caller."""

    def __init__(self, status_code: int, payload: Dict[str, Any]) -> None:
        super().__init__(payload.get("error", "chat proxy error"))
        self.status_code = status_code
        self.payload = payload


def build_messages(system_prompt: str, message: str, history: List[Dict[str, str]]) -> List[Dict[str, str]]:
    """System prompt, the last few history turns, then the new user message."""
    recent = history[-HISTORY_LIMIT:] if history else []
    return [{"role": "system", "content": system_prompt}, *recent, {"role": "user", "content": message}]


def _timeout() -> float:
    raw = os.environ.get("GROQ_TIMEOUT", "")
    try:
        return float(raw) if raw else DEFAULT_TIMEOUT
    except ValueError:
        logger.warning("Ignoring invalid GROQ_TIMEOUT %r", raw)
        return DEFAULT_TIMEOUT


def _reply_content(data: Any) -> str:
    if not isinstance(data, dict):
        return FALLBACK_REPLY
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return FALLBACK_REPLY
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return FALLBACK_REPLY
    content = message.get("content")
    return content if isinstance(content, str) and content else FALLBACK_REPLY


def _error_body(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


def complete_chat(messages: List[Dict[str, str]], api_key: Optional[str] = None) -> Dict[str, str]:
    """Call the chat-completions API and return ``{"message", "model"}``.

    Raises :class:`ChatProxyError` when no key is configured or the upstream
    call fails; there is no retry.
    """
    api_key = api_key or os.environ.get("GROQ_API_KEY")
    if not api_key:
        raise ChatProxyError(500, {"error": "API key not configured"})

    url = os.environ.get("GROQ_API_URL", GROQ_API_URL)
    model = os.environ.get("GROQ_MODEL", DEFAULT_MODEL)
    timeout = _timeout()
    headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
    payload = {"model": model, "messages": messages, "max_tokens": 500, "temperature": 0.7}

    try:
        resp = requests.post(url, headers=headers, json=payload, timeout=timeout)
    except requests.RequestException as exc:
        logger.exception("Chat upstream request failed: %s", exc)
        raise ChatProxyError(500, {"error": "Internal server error"}) from exc

    if not resp.ok:
        details = _error_body(resp)
        logger.error("Chat upstream error %s: %s", resp.status_code, details)
        raise ChatProxyError(resp.status_code, {"error": "Failed to get response from AI", "details": details})

    try:
        data = resp.json()
    except ValueError as exc:
        logger.exception("Chat upstream returned invalid JSON")
        raise ChatProxyError(500, {"error": "Internal server error"}) from exc

    upstream_model = data.get("model") if isinstance(data, dict) else None
    if not isinstance(upstream_model, str) or not upstream_model:
        upstream_model = model
    return {"message": _reply_content(data), "model": upstream_model}
