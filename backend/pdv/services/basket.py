"""
Basket value types and the duplicate item guard.

A basket is the ordered list of (product_id, quantity) pairs submitted with a
sale request. Parsing here replaces the request-validation layer: anything
that reaches the sales service has passed `SaleRequest.validate()`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from ..errors import ValidationError
from ..models import PAYMENT_METHODS
from ..validation import strict_int


@dataclass(frozen=True)
class BasketItem:
    product_id: int
    quantity: int

    def validate(self, position: int) -> None:
        if self.quantity < 1:
            raise ValidationError(
                "Item quantity must be at least 1",
                details={"index": position, "product_id": self.product_id},
            )


@dataclass(frozen=True)
class SaleRequest:
    payment_method: str
    discount_percent: int
    items: tuple[BasketItem, ...]

    @classmethod
    def from_payload(cls, payload: Any) -> "SaleRequest":
        """Build a request from decoded JSON, raising ValidationError on bad input."""
        if not isinstance(payload, dict):
            raise ValidationError("Invalid JSON payload")

        raw_items = payload.get("items")
        if not isinstance(raw_items, list):
            raise ValidationError("items must be a list")

        items = []
        for index, raw in enumerate(raw_items):
            if not isinstance(raw, dict):
                raise ValidationError("Each item must be an object", details={"index": index})
            if raw.get("product_id") is None or raw.get("quantity") is None:
                raise ValidationError(
                    "Each item requires product_id and quantity", details={"index": index}
                )
            items.append(BasketItem(
                product_id=strict_int(raw["product_id"], "product_id"),
                quantity=strict_int(raw["quantity"], "quantity"),
            ))

        if payload.get("discount_percent") is None:
            raise ValidationError("discount_percent is required")

        request = cls(
            payment_method=str(payload.get("payment_method") or "").strip().upper(),
            discount_percent=strict_int(payload["discount_percent"], "discount_percent"),
            items=tuple(items),
        )
        request.validate()
        return request

    def validate(self) -> None:
        if self.payment_method not in PAYMENT_METHODS:
            raise ValidationError(
                "payment_method must be one of: " + ", ".join(PAYMENT_METHODS),
                details={"payment_method": self.payment_method},
            )
        if not 0 <= self.discount_percent <= 100:
            raise ValidationError(
                "discount_percent must be between 0 and 100",
                details={"discount_percent": self.discount_percent},
            )
        if not self.items:
            raise ValidationError("A sale must contain at least one item")
        for position, item in enumerate(self.items):
            item.validate(position)


def has_duplicate_products(items: Iterable[BasketItem]) -> bool:
    """True when any product id appears more than once in the basket."""
    seen: set[int] = set()
    for item in items:
        if item.product_id in seen:
            return True
        seen.add(item.product_id)
    return False
