"""Utility helpers for loading the storefront product catalog into memory."""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

logger = logging.getLogger(__name__)

_POSSIBLE_PATHS = [
    Path(__file__).resolve().parents[3] / "data" / "products.json",
    Path(__file__).resolve().parents[2] / "data" / "products.json",
]

REQUIRED_FIELDS = ("id", "name", "price", "imageUrl")


class CatalogUnavailable(RuntimeError):
    """Raised when the catalog source cannot be read or decoded."""


def _find_catalog_path() -> Path:
    override = os.environ.get("CATALOG_PATH")
    if override:
        return Path(override)
    for p in _POSSIBLE_PATHS:
        if p.exists():
            return p
    # fall back to the first path which will raise a readable error on access
    return _POSSIBLE_PATHS[0]


class Product(BaseModel):
    """A catalog record. Field aliases follow the external camelCase shape."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    price: str = Field(min_length=1)
    image_url: str = Field(alias="imageUrl", min_length=1)
    original_price: Optional[str] = Field(default=None, alias="originalPrice")
    category: str = ""
    description: str = ""
    collection: str = ""
    material: Optional[str] = None
    price_range: Optional[str] = Field(default=None, alias="priceRange")
    features: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_category_id(cls, data: Any) -> Any:
        # Catalog files nest the facet values under ``categoryId``.
        if isinstance(data, dict) and isinstance(data.get("categoryId"), dict):
            data = dict(data)
            facets = data.pop("categoryId")
            for key in ("material", "priceRange", "features"):
                if data.get(key) is None and facets.get(key):
                    data[key] = facets[key]
        return data

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


def product_from_record(record: Any) -> Optional[Product]:
    """Validate a raw record, returning ``None`` when it is unusable."""
    if not isinstance(record, dict):
        logger.warning("Skipping product record that is not an object: %r", record)
        return None
    missing = [key for key in REQUIRED_FIELDS if not record.get(key)]
    if missing:
        logger.warning("Product record %r is missing required fields: %s", record.get("id"), ", ".join(missing))
        return None
    try:
        return Product.model_validate(record)
    except ValidationError as exc:
        logger.warning("Product record %r failed validation: %s", record.get("id"), exc)
        return None


def parse_catalog(data: Any) -> List[Product]:
    if not isinstance(data, list):
        raise CatalogUnavailable("Catalog payload must be a list of products")
    products: List[Product] = []
    seen: set[str] = set()
    for record in data:
        product = product_from_record(record)
        if product is None:
            continue
        if product.id in seen:
            logger.warning("Skipping duplicate product id %s", product.id)
            continue
        seen.add(product.id)
        products.append(product)
    return products


def read_catalog(path: Path) -> List[Product]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise CatalogUnavailable(f"Failed to load catalog from {path}: {exc}") from exc
    products = parse_catalog(data)
    logger.info("Loaded %d products from %s", len(products), path)
    return products


@lru_cache(maxsize=1)
def load_catalog() -> tuple[Product, ...]:
    """Load the catalog once per process; it is immutable afterwards."""
    return tuple(read_catalog(_find_catalog_path()))


def collections(products: Iterable[Product]) -> List[str]:
    seen: List[str] = []
    for product in products:
        if product.collection and product.collection not in seen:
            seen.append(product.collection)
    return seen
