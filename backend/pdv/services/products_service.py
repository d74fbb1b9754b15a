# backend/pdv/services/products_service.py
"""
Catalog service.

Descriptions are unique among active products: a voided product keeps its
description, but reactivating it fails if another active product took it
meanwhile. Stock levels set here go through the stock ledger.
"""
from __future__ import annotations

from typing import Any

from flask import current_app

from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Product
from . import stock_ledger
from .concurrency import lock_for_update, run_with_retry
from .pagination import paginate

# Maximum price: 9,999,999.99 (999,999,999 cents)
MAX_PRICE_CENTS = 999_999_999


def _clean_patch(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    missing = [f for f in ("description", "quantity", "price_cents") if payload.get(f) is None]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    description = str(payload["description"]).strip()
    if not description:
        raise ValidationError("description must not be blank")
    if len(description) > 255:
        raise ValidationError("description must be at most 255 characters")

    quantity = payload["quantity"]
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise ValidationError("quantity must be a non-negative integer")

    price_cents = payload["price_cents"]
    if isinstance(price_cents, bool) or not isinstance(price_cents, int):
        raise ValidationError("price_cents must be an integer")
    if price_cents < 0:
        raise ValidationError("price_cents cannot be negative")
    if price_cents > MAX_PRICE_CENTS:
        raise ValidationError(f"price_cents cannot exceed {MAX_PRICE_CENTS}")

    return {"description": description, "quantity": quantity, "price_cents": price_cents}


def _description_in_use(description: str, exclude_product_id: int | None = None) -> bool:
    query = db.session.query(Product).filter(Product.description == description, Product.is_active)
    if exclude_product_id is not None:
        query = query.filter(Product.id != exclude_product_id)
    return db.session.query(query.exists()).scalar()


def find_product(product_id: int) -> Product:
    """Product regardless of its active state."""
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError(f"Product {product_id} not found", details={"product_id": product_id})
    return product


def find_active_product(product_id: int) -> Product:
    product = db.session.query(Product).filter(Product.id == product_id, Product.is_active).first()
    if product is None:
        raise NotFoundError(f"Product {product_id} not found", details={"product_id": product_id})
    return product


def find_inactive_product(product_id: int) -> Product:
    product = db.session.query(Product).filter(Product.id == product_id, ~Product.is_active).first()
    if product is None:
        raise NotFoundError(f"Product {product_id} not found", details={"product_id": product_id})
    return product


def list_products(active: bool = True, page: int | None = None, per_page: int | None = None) -> dict:
    state = Product.is_active if active else ~Product.is_active
    query = db.session.query(Product).filter(state).order_by(Product.description.asc(), Product.id.asc())
    return paginate(query, page, per_page)


def _load_locked(product_id: int, *, active: bool) -> Product:
    state = Product.is_active if active else ~Product.is_active
    query = db.session.query(Product).filter(Product.id == product_id, state)
    product = lock_for_update(query).first()
    if product is None:
        raise NotFoundError(f"Product {product_id} not found", details={"product_id": product_id})
    return product


def create_product(payload: dict) -> Product:
    patch = _clean_patch(payload)

    def _op():
        if _description_in_use(patch["description"]):
            raise ConflictError(
                f"Description {patch['description']} is already in use",
                details={"description": patch["description"]},
            )

        product = Product(description=patch["description"], price_cents=patch["price_cents"], quantity=0)
        db.session.add(product)
        stock_ledger.set_on_hand(product, patch["quantity"])
        db.session.commit()
        return product

    product = run_with_retry(_op)
    current_app.logger.info("Product %s created with quantity %s", product.id, product.quantity)
    return product


def update_product(product_id: int, payload: dict) -> Product:
    """
    Replace description, price and on-hand quantity of an active product.

    The row is locked for the edit; a concurrent sale bumping its version makes
    the whole edit re-run, and ConcurrentUpdateError surfaces once retries run out.
    """
    patch = _clean_patch(payload)

    def _op():
        product = _load_locked(product_id, active=True)

        if _description_in_use(patch["description"], exclude_product_id=product.id):
            raise ConflictError(
                f"Description {patch['description']} is already in use",
                details={"description": patch["description"]},
            )

        product.description = patch["description"]
        product.price_cents = patch["price_cents"]
        stock_ledger.set_on_hand(product, patch["quantity"])
        db.session.commit()
        return product

    return run_with_retry(_op)


def deactivate_product(product_id: int) -> Product:
    def _op():
        product = _load_locked(product_id, active=True)
        product.void()
        db.session.commit()
        return product

    return run_with_retry(_op)


def reactivate_product(product_id: int) -> Product:
    def _op():
        product = _load_locked(product_id, active=False)

        if _description_in_use(product.description, exclude_product_id=product.id):
            raise ConflictError(
                f"Description {product.description} is already in use",
                details={"description": product.description},
            )

        product.restore()
        db.session.commit()
        return product

    return run_with_retry(_op)
