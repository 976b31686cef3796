"""Fusion storefront: headless cart/wishlist state, catalog pipeline and chat proxy."""

from __future__ import annotations

__version__ = "1.0.0"
