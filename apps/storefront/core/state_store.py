"""Key-value persistence for the cart, wishlist and recently-viewed ids.

The storefront state is single-user and advisory. Each collection lives
under its own key as JSON text; a value that cannot be decoded resets only
that collection and never raises.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from pydantic import ValidationError

from .dataset import Product
from .models import CartLine

logger = logging.getLogger(__name__)

CART_KEY = "ris_cart"
WISHLIST_KEY = "ris_wishlist"
RECENTLY_VIEWED_KEY = "recentlyViewed"


class KeyValueBackend(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryBackend:
    """Dictionary backed storage, handy for tests and headless sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileBackend:
    """Stores every key as a string inside one JSON object on disk."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring state file %s: expected an object", self.path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")


@dataclass
class StoredState:
    cart: List[CartLine] = field(default_factory=list)
    wishlist: List[Product] = field(default_factory=list)
    recently_viewed: List[str] = field(default_factory=list)


def _read_list(backend: KeyValueBackend, key: str) -> Optional[list]:
    try:
        raw = backend.get(key)
    except OSError as exc:
        logger.warning("Could not read %s from storage: %s", key, exc)
        return None
    if raw is None:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        return None
    if value is None:
        return []
    return value if isinstance(value, list) else None


class StateStore:
    """Loads and saves the three storefront collections independently."""

    def __init__(self, backend: Optional[KeyValueBackend] = None) -> None:
        self.backend = backend if backend is not None else MemoryBackend()

    def _load_cart(self) -> List[CartLine]:
        items = _read_list(self.backend, CART_KEY)
        if items is not None:
            try:
                lines = [CartLine.model_validate(item) for item in items]
            except ValidationError:
                lines = None
            if lines is not None and len({line.id for line in lines}) == len(lines):
                return lines
        logger.warning("Corrupted cart data in storage, resetting.")
        return []

    def _load_wishlist(self) -> List[Product]:
        items = _read_list(self.backend, WISHLIST_KEY)
        if items is not None:
            try:
                entries = [Product.model_validate(item) for item in items]
            except ValidationError:
                entries = None
            if entries is not None and len({entry.id for entry in entries}) == len(entries):
                return entries
        logger.warning("Corrupted wishlist data in storage, resetting.")
        return []

    def _load_recently_viewed(self) -> List[str]:
        ids = _read_list(self.backend, RECENTLY_VIEWED_KEY)
        if ids is not None and all(isinstance(i, str) for i in ids):
            return list(ids)
        logger.warning("Corrupted recently viewed data in storage, resetting.")
        return []

    def load(self) -> StoredState:
        return StoredState(
            cart=self._load_cart(),
            wishlist=self._load_wishlist(),
            recently_viewed=self._load_recently_viewed(),
        )

    def save(self, cart: List[CartLine], wishlist: List[Product], recently_viewed: List[str]) -> None:
        """Overwrite every key with the full current collection."""
        self.save_cart(cart, wishlist)
        self.save_recently_viewed(recently_viewed)

    def save_cart(self, cart: List[CartLine], wishlist: List[Product]) -> None:
        self._write(CART_KEY, [line.to_record() for line in cart])
        self._write(WISHLIST_KEY, [entry.to_record() for entry in wishlist])

    def save_recently_viewed(self, recently_viewed: List[str]) -> None:
        self._write(RECENTLY_VIEWED_KEY, list(recently_viewed))

    def _write(self, key: str, value: list) -> None:
        try:
            self.backend.set(key, json.dumps(value, ensure_ascii=False))
        except OSError:
            logger.exception("Failed to persist %s", key)
