"""Session-level records built on top of catalog products."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import ConfigDict, Field

from .dataset import Product


class CartLine(Product):
    """A product in the cart together with how many of it were added."""

    model_config = ConfigDict(populate_by_name=True, frozen=False, validate_assignment=True)

    quantity: int = Field(default=1, ge=1)

    @classmethod
    def from_product(cls, product: Product) -> "CartLine":
        return cls.model_validate({**product.model_dump(), "quantity": 1})

    def as_product(self) -> Product:
        return Product.model_validate(self.model_dump(exclude={"quantity"}))


class ToastKind(str, Enum):
    SUCCESS = "success"
    WISHLIST = "wishlist"


@dataclass(frozen=True)
class Toast:
    message: str
    kind: ToastKind = ToastKind.SUCCESS
    duration_ms: int = 2000
