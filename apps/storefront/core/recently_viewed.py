from __future__ import annotations

from typing import Iterable, List, Optional

from .dataset import Product

MAX_RECENTLY_VIEWED = 4


class RecentlyViewed:
    """Most-recent-first list of product ids, bounded and free of duplicates."""

    def __init__(self, ids: Optional[Iterable[str]] = None, limit: int = MAX_RECENTLY_VIEWED) -> None:
        self.limit = limit
        self.ids: List[str] = []
        for product_id in ids or []:
            if product_id and product_id not in self.ids:
                self.ids.append(product_id)
        del self.ids[limit:]

    def __len__(self) -> int:
        return len(self.ids)

    def __iter__(self):
        return iter(self.ids)

    def record(self, product_id: str) -> bool:
        """Bump ``product_id`` to the front. Returns False for an empty id."""
        if not product_id:
            return False
        if product_id in self.ids:
            self.ids.remove(product_id)
        self.ids.insert(0, product_id)
        del self.ids[self.limit:]
        return True

    def resolve(self, catalog: Iterable[Product]) -> List[Product]:
        """Map ids to catalog products in order, skipping ids no longer listed."""
        by_id = {product.id: product for product in catalog}
        return [by_id[product_id] for product_id in self.ids if product_id in by_id]
