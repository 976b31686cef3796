"""Single-user storefront state: cart, wishlist, recently viewed and quick view.

``StorefrontSession`` owns every collection. All mutations go through its
methods, each of which writes the affected collections back to the
:class:`~storefront.core.state_store.StateStore` and then notifies change
listeners so the presentation layer can re-render.
"""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Callable, Deque, List, Optional, Union

from .dataset import Product, product_from_record
from .models import CartLine, Toast, ToastKind
from .pricing import price_value
from .recently_viewed import RecentlyViewed
from .state_store import StateStore

logger = logging.getLogger(__name__)

ProductLike = Union[Product, dict, None]
ChangeListener = Callable[["StorefrontSession"], None]
ToastListener = Callable[[Toast], None]

TOAST_HISTORY = 5


class ConfirmationState(str, Enum):
    IDLE = "idle"
    PENDING = "pending-confirmation"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


class Confirmation:
    """Two-step guard for a destructive action: request, then confirm or cancel."""

    def __init__(self, action: Callable[[], None]) -> None:
        self._action = action
        self.state = ConfirmationState.IDLE

    @property
    def pending(self) -> bool:
        return self.state is ConfirmationState.PENDING

    def request(self) -> None:
        self.state = ConfirmationState.PENDING

    def confirm(self) -> bool:
        if not self.pending:
            return False
        self._action()
        self.state = ConfirmationState.COMMITTED
        return True

    def cancel(self) -> bool:
        if not self.pending:
            return False
        self.state = ConfirmationState.CANCELLED
        return True

    def reset(self) -> None:
        """Drop a pending request whose target has already gone away."""
        if self.pending:
            self.state = ConfirmationState.IDLE


def _coerce_product(product: ProductLike) -> Optional[Product]:
    if product is None:
        return None
    if isinstance(product, CartLine):
        return product.as_product()
    if isinstance(product, Product):
        return product
    return product_from_record(product)


class StorefrontSession:
    def __init__(
        self,
        store: Optional[StateStore] = None,
        *,
        on_change: Optional[ChangeListener] = None,
        on_toast: Optional[ToastListener] = None,
    ) -> None:
        self.store = store if store is not None else StateStore()
        state = self.store.load()
        self.cart: List[CartLine] = state.cart
        self.wishlist: List[Product] = state.wishlist
        self.recently_viewed = RecentlyViewed(state.recently_viewed)
        self.quick_view: Optional[Product] = None
        self.toasts: Deque[Toast] = deque(maxlen=TOAST_HISTORY)
        self._change_listeners: List[ChangeListener] = [on_change] if on_change else []
        self._toast_listeners: List[ToastListener] = [on_toast] if on_toast else []
        self.cart_confirmation = Confirmation(self._empty_cart)
        self.wishlist_confirmation = Confirmation(self._empty_wishlist)

    # -- listeners -----------------------------------------------------

    def subscribe(self, listener: ChangeListener) -> None:
        self._change_listeners.append(listener)

    def subscribe_toasts(self, listener: ToastListener) -> None:
        self._toast_listeners.append(listener)

    def _changed(self) -> None:
        if not self.cart:
            self.cart_confirmation.reset()
        if not self.wishlist:
            self.wishlist_confirmation.reset()
        self.store.save_cart(self.cart, self.wishlist)
        for listener in self._change_listeners:
            listener(self)

    def _toast(self, message: str, kind: ToastKind = ToastKind.SUCCESS) -> None:
        toast = Toast(message=message, kind=kind)
        self.toasts.append(toast)
        for listener in self._toast_listeners:
            listener(toast)

    # -- derived values ------------------------------------------------

    @property
    def cart_item_count(self) -> int:
        return sum(line.quantity for line in self.cart)

    @property
    def wishlist_item_count(self) -> int:
        return len(self.wishlist)

    @property
    def subtotal(self) -> float:
        return sum(price_value(line.price) * line.quantity for line in self.cart)

    def cart_line(self, product_id: str) -> Optional[CartLine]:
        return next((line for line in self.cart if line.id == product_id), None)

    def wishlist_entry(self, product_id: str) -> Optional[Product]:
        return next((entry for entry in self.wishlist if entry.id == product_id), None)

    # -- cart ----------------------------------------------------------

    def add_to_cart(self, product: ProductLike) -> Optional[CartLine]:
        item = _coerce_product(product)
        if item is None:
            logger.warning("Ignoring add to cart for an incomplete product")
            return None
        line = self.cart_line(item.id)
        if line is not None:
            line.quantity += 1
        else:
            line = CartLine.from_product(item)
            self.cart.append(line)
        self._changed()
        self._toast(f"{item.name} added to cart", ToastKind.SUCCESS)
        return line

    def remove_from_cart(self, product_id: str) -> None:
        self.cart = [line for line in self.cart if line.id != product_id]
        self._changed()

    def increase_quantity(self, product_id: str) -> None:
        line = self.cart_line(product_id)
        if line is None:
            return
        line.quantity += 1
        self._changed()

    def decrease_quantity(self, product_id: str) -> None:
        line = self.cart_line(product_id)
        if line is None:
            return
        if line.quantity <= 1:
            self.remove_from_cart(product_id)
            return
        line.quantity -= 1
        self._changed()

    def clear_cart(self) -> bool:
        """Ask to empty the cart. Nothing changes until :meth:`confirm_clear_cart`."""
        if not self.cart:
            return False
        self.cart_confirmation.request()
        return True

    def confirm_clear_cart(self) -> bool:
        return self.cart_confirmation.confirm()

    def cancel_clear_cart(self) -> bool:
        return self.cart_confirmation.cancel()

    def _empty_cart(self) -> None:
        self.cart = []
        self._changed()
        self._toast("Cart cleared", ToastKind.SUCCESS)

    # -- wishlist ------------------------------------------------------

    def add_to_wishlist(self, product: ProductLike) -> bool:
        """Returns True when added, False when already present or unusable."""
        item = _coerce_product(product)
        if item is None:
            logger.warning("Ignoring add to wishlist for an incomplete product")
            return False
        if self.wishlist_entry(item.id) is not None:
            self._toast(f"{item.name} is already in your wishlist", ToastKind.WISHLIST)
            return False
        self.wishlist.append(item)
        self._changed()
        self._toast(f"{item.name} added to wishlist", ToastKind.WISHLIST)
        return True

    def remove_from_wishlist(self, product_id: str) -> None:
        self.wishlist = [entry for entry in self.wishlist if entry.id != product_id]
        self._changed()

    def move_to_cart(self, product_id: str) -> Optional[CartLine]:
        # Two separate writes; a failure in between leaves the item in both lists.
        entry = self.wishlist_entry(product_id)
        if entry is None:
            return None
        line = self.add_to_cart(entry)
        self.remove_from_wishlist(product_id)
        return line

    def clear_wishlist(self) -> bool:
        if not self.wishlist:
            return False
        self.wishlist_confirmation.request()
        return True

    def confirm_clear_wishlist(self) -> bool:
        return self.wishlist_confirmation.confirm()

    def cancel_clear_wishlist(self) -> bool:
        return self.wishlist_confirmation.cancel()

    def _empty_wishlist(self) -> None:
        self.wishlist = []
        self._changed()
        self._toast("Wishlist cleared", ToastKind.SUCCESS)

    # -- recently viewed and quick view --------------------------------

    def record_view(self, product_id: str) -> None:
        if not self.recently_viewed.record(product_id):
            return
        self.store.save_recently_viewed(self.recently_viewed.ids)
        for listener in self._change_listeners:
            listener(self)

    def open_quick_view(self, product: ProductLike) -> Optional[Product]:
        item = _coerce_product(product)
        if item is None:
            return None
        self.quick_view = item
        self.record_view(item.id)
        return item

    def close_quick_view(self) -> None:
        self.quick_view = None

    def quick_view_add_to_cart(self) -> Optional[CartLine]:
        if self.quick_view is None:
            return None
        line = self.add_to_cart(self.quick_view)
        self.close_quick_view()
        return line

    def quick_view_add_to_wishlist(self) -> bool:
        if self.quick_view is None:
            return False
        added = self.add_to_wishlist(self.quick_view)
        self.close_quick_view()
        return added

