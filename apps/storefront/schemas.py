"""Pydantic schemas for the HTTP surface."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .core.pipeline import ActiveFilter, FilterQuery
from .core.view import ProductCardView


class ChatTurn(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    message: Optional[str] = None
    history: List[ChatTurn] = Field(default_factory=list)


class ChatResponse(BaseModel):
    message: str
    model: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str


class CatalogSearchRequest(FilterQuery):
    pass


class CatalogSearchResponse(BaseModel):
    results: List[ProductCardView] = Field(default_factory=list)
    message: Optional[str] = None
    active_filters: List[ActiveFilter] = Field(default_factory=list)
    debug: dict = Field(default_factory=dict)
