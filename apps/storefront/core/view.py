"""Pure projections of session and catalog state into view models.

Nothing here touches a UI toolkit; a template, a terminal or a JSON API can
render the returned models directly.
"""

from __future__ import annotations

import math
import re
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from .dataset import Product
from .models import CartLine
from .pipeline import ActiveFilter, FilterQuery, active_filters, compute_visible
from .pricing import format_price, price_value
from .session import StorefrontSession

NO_MATCHES_MESSAGE = "No products found matching your criteria."
CATALOG_UNAVAILABLE_MESSAGE = "Unable to load products at the moment."
LOW_STOCK_LABEL = "Only 4 left!!"


class ProductCardView(BaseModel):
    id: str
    name: str
    price: str
    image_url: str
    category: str = ""
    original_price: Optional[str] = None
    discount_percent: Optional[int] = None
    low_stock_label: Optional[str] = None
    quick_view_image_url: str = ""


class CartLineView(BaseModel):
    id: str
    name: str
    category: str = ""
    image_url: str
    quantity: int
    line_total: str


class CartView(BaseModel):
    empty: bool
    lines: List[CartLineView] = Field(default_factory=list)
    subtotal: str = format_price(0)
    confirm_pending: bool = False


class WishlistView(BaseModel):
    empty: bool
    entries: List[ProductCardView] = Field(default_factory=list)
    confirm_pending: bool = False


class Badges(BaseModel):
    cart: Optional[int] = None
    wishlist: Optional[int] = None


class GridView(BaseModel):
    products: List[ProductCardView] = Field(default_factory=list)
    message: Optional[str] = None
    active_filters: List[ActiveFilter] = Field(default_factory=list)


class ViewModel(BaseModel):
    badges: Badges
    cart: CartView
    wishlist: WishlistView
    recently_viewed: List[ProductCardView] = Field(default_factory=list)
    quick_view: Optional[ProductCardView] = None
    grid: Optional[GridView] = None


def discount_percent(product: Product) -> Optional[int]:
    if not product.original_price:
        return None
    original = price_value(product.original_price)
    current = price_value(product.price)
    if original <= current:
        return None
    return math.floor((original - current) / original * 100 + 0.5)


def shows_low_stock(product_id: str) -> bool:
    digits = re.sub(r"\D", "", product_id)
    return bool(digits) and int(digits) % 2 != 0


def product_card(product: Product) -> ProductCardView:
    percent = discount_percent(product)
    return ProductCardView(
        id=product.id,
        name=product.name,
        price=product.price,
        image_url=product.image_url,
        category=product.category,
        original_price=product.original_price if percent is not None else None,
        discount_percent=percent,
        low_stock_label=LOW_STOCK_LABEL if shows_low_stock(product.id) else None,
        quick_view_image_url=product.image_url.replace("400x500", "800x1000"),
    )


def cart_line_view(line: CartLine) -> CartLineView:
    return CartLineView(
        id=line.id,
        name=line.name,
        category=line.category,
        image_url=line.image_url,
        quantity=line.quantity,
        line_total=format_price(price_value(line.price) * line.quantity),
    )


def render_grid(catalog: Optional[Sequence[Product]], query: FilterQuery) -> GridView:
    """``catalog=None`` means the catalog could not be loaded."""
    if catalog is None:
        return GridView(message=CATALOG_UNAVAILABLE_MESSAGE)
    visible = compute_visible(catalog, query)
    return GridView(
        products=[product_card(p) for p in visible],
        message=None if visible else NO_MATCHES_MESSAGE,
        active_filters=active_filters(query),
    )


def render(
    session: StorefrontSession,
    catalog: Optional[Sequence[Product]] = (),
    query: Optional[FilterQuery] = None,
) -> ViewModel:
    cart_count = session.cart_item_count
    wishlist_count = session.wishlist_item_count
    return ViewModel(
        badges=Badges(cart=cart_count or None, wishlist=wishlist_count or None),
        cart=CartView(
            empty=not session.cart,
            lines=[cart_line_view(line) for line in session.cart],
            subtotal=format_price(session.subtotal),
            confirm_pending=session.cart_confirmation.pending,
        ),
        wishlist=WishlistView(
            empty=not session.wishlist,
            entries=[product_card(entry) for entry in session.wishlist],
            confirm_pending=session.wishlist_confirmation.pending,
        ),
        recently_viewed=[product_card(p) for p in session.recently_viewed.resolve(catalog or ())],
        quick_view=product_card(session.quick_view) if session.quick_view else None,
        grid=render_grid(catalog, query) if query is not None else None,
    )
