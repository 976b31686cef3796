"""Collection filter, search and sort over the in-memory catalog.

``compute_visible`` is pure: the same catalog and query always give the
same ordered result. Every sort is stable, so products that tie on the
sort key keep their catalog order.
"""

from __future__ import annotations

import unicodedata
from enum import Enum
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .dataset import Product
from .pricing import price_value

ALL = "all"

FACETS = ("material", "price_range", "features")

FACET_LABELS: Dict[str, str] = {
    "material": "Material",
    "price_range": "Price",
    "features": "Features",
}


class SortKey(str, Enum):
    DEFAULT = "default"
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"


class FilterQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    collection: str = ""
    search_term: str = Field(default="", alias="searchTerm")
    sort_key: SortKey = Field(default=SortKey.DEFAULT, alias="sortKey")
    material: str = ALL
    price_range: str = Field(default=ALL, alias="priceRange")
    features: str = ALL


class ActiveFilter(BaseModel):
    id: str
    label: str
    value: str


def _name_key(product: Product) -> str:
    return unicodedata.normalize("NFKD", product.name).casefold()


def _matches(product: Product, query: FilterQuery, term: str) -> bool:
    if product.collection != query.collection:
        return False
    for facet in FACETS:
        wanted = getattr(query, facet)
        if wanted != ALL and (getattr(product, facet) or "") != wanted:
            return False
    if not term:
        return True
    return term in product.name.lower() or term in (product.category or "").lower()


def filter_products(catalog: Sequence[Product], query: FilterQuery) -> List[Product]:
    term = query.search_term.strip().lower()
    return [product for product in catalog if _matches(product, query, term)]


def sort_products(products: Sequence[Product], sort_key: SortKey, catalog: Sequence[Product]) -> List[Product]:
    if sort_key is SortKey.DEFAULT:
        position = {product.id: index for index, product in enumerate(catalog)}
        return sorted(products, key=lambda p: position.get(p.id, len(position)))
    if sort_key in (SortKey.NAME_ASC, SortKey.NAME_DESC):
        return sorted(products, key=_name_key, reverse=sort_key is SortKey.NAME_DESC)
    return sorted(products, key=lambda p: price_value(p.price), reverse=sort_key is SortKey.PRICE_DESC)


def compute_visible(catalog: Sequence[Product], query: FilterQuery) -> List[Product]:
    return sort_products(filter_products(catalog, query), query.sort_key, catalog)


def active_filters(query: FilterQuery) -> List[ActiveFilter]:
    """Every facet filter that is currently narrowing the results."""
    return [
        ActiveFilter(id=facet, label=f"{FACET_LABELS[facet]}: {getattr(query, facet)}", value=getattr(query, facet))
        for facet in FACETS
        if getattr(query, facet) != ALL
    ]


def clear_filter(query: FilterQuery, facet: str) -> FilterQuery:
    if facet not in FACETS:
        raise ValueError(f"Unknown filter: {facet}")
    return query.model_copy(update={facet: ALL})


def reset_filters(query: FilterQuery, collection: Optional[str] = None) -> FilterQuery:
    """Back to defaults, keeping the current collection unless one is given."""
    return FilterQuery(collection=query.collection if collection is None else collection)
