"""Chat proxy: forwards shopper questions to the LLM with a catalog-aware prompt."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.dataset import CatalogUnavailable, load_catalog
from ..core.llm_adapter import ChatProxyError, build_messages, complete_chat
from ..core.prompts import build_system_prompt
from ..schemas import ChatRequest, ChatResponse, HealthResponse

router = APIRouter()

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def system_prompt() -> str:
    try:
        products = load_catalog()
    except CatalogUnavailable as exc:
        logger.error("Error loading catalog for chat prompt: %s", exc)
        products = ()
    return build_system_prompt(products)


@router.post("/chat", response_model=ChatResponse)
def chat(request: ChatRequest):
    if not request.message:
        return JSONResponse(status_code=400, content={"error": "Message is required"})

    history = [turn.model_dump() for turn in request.history]
    messages = build_messages(system_prompt(), request.message, history)
    try:
        reply = complete_chat(messages)
    except ChatProxyError as exc:
        return JSONResponse(status_code=exc.status_code, content=exc.payload)
    except Exception:
        logger.exception("Server error while handling chat request")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
    return ChatResponse(**reply)


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc).isoformat())
