"""
Stock ledger: the only code path that writes Product.quantity.

Each call locks one product row, applies the change and flushes. Nothing here
commits; the calling service owns the transaction and decides whether the
whole unit of work lands or rolls back.
"""

from __future__ import annotations

from ..errors import InsufficientStockError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Product
from .concurrency import lock_for_update


def _load_locked(product_id: int, *, active_only: bool) -> Product:
    query = db.session.query(Product).filter(Product.id == product_id)
    if active_only:
        query = query.filter(Product.is_active)
    product = lock_for_update(query).first()
    if product is None:
        raise NotFoundError(f"Product {product_id} not found", details={"product_id": product_id})
    return product


def _require_positive(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError("Stock movements require a quantity of at least 1",
                              details={"quantity": quantity})


def reserve(product_id: int, quantity: int, *, active_only: bool = True) -> Product:
    """
    Take `quantity` units out of stock.

    Raises NotFoundError if the product is missing (or voided, when
    active_only), InsufficientStockError if fewer than `quantity` are on hand.
    """
    _require_positive(quantity)
    product = _load_locked(product_id, active_only=active_only)

    if quantity > product.quantity:
        raise InsufficientStockError(product.id, quantity, product.quantity)

    product.quantity -= quantity
    db.session.flush()
    return product


def release(product_id: int, quantity: int) -> Product:
    """Put `quantity` units back; voided products still take their stock back."""
    _require_positive(quantity)
    product = _load_locked(product_id, active_only=False)
    product.quantity += quantity
    db.session.flush()
    return product


def set_on_hand(product: Product, quantity: int) -> Product:
    """Catalog edit (restock or count correction) to an absolute quantity."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise ValidationError("quantity must be a non-negative integer", details={"quantity": quantity})
    product.quantity = quantity
    db.session.flush()
    return product
