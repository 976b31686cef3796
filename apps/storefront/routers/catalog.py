"""Catalog endpoints backed by the in-memory product list.

The browser applies the same filter, search and sort rules locally; these
handlers expose them so other clients get identical ordering.
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.dataset import CatalogUnavailable, collections, load_catalog
from ..core.view import CATALOG_UNAVAILABLE_MESSAGE, render_grid
from ..schemas import CatalogSearchRequest, CatalogSearchResponse

router = APIRouter()

logger = logging.getLogger(__name__)


def _unavailable(exc: CatalogUnavailable) -> JSONResponse:
    logger.error("Error loading products: %s", exc)
    return JSONResponse(status_code=503, content={"error": CATALOG_UNAVAILABLE_MESSAGE})


@router.get("/products")
def list_products():
    try:
        products = load_catalog()
    except CatalogUnavailable as exc:
        return _unavailable(exc)
    return [product.to_record() for product in products]


@router.get("/collections", response_model=List[str])
def list_collections():
    try:
        products = load_catalog()
    except CatalogUnavailable as exc:
        return _unavailable(exc)
    return collections(products)


@router.post("/search", response_model=CatalogSearchResponse)
def search_catalog(request: CatalogSearchRequest):
    try:
        products = load_catalog()
    except CatalogUnavailable as exc:
        return _unavailable(exc)
    grid = render_grid(products, request)
    return CatalogSearchResponse(
        results=grid.products,
        message=grid.message,
        active_filters=grid.active_filters,
        debug={"matched": len(grid.products), "catalog_size": len(products)},
    )
