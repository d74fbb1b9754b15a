"""
Sales Service - basket commit, void and restore

WHY: A sale is the only operation that moves stock in bulk. Commit, void and
restore each run as one unit of work: every stock movement, sale row and item
row lands together or not at all (see concurrency.run_with_retry).

INVARIANTS:
- Stock never goes negative (stock_ledger.reserve refuses)
- Item prices are snapshots taken at commit and never re-derived
- total_cents is the pre-discount sum; discount is applied by reports only
- A sale and all of its items share one active/voided state
"""

from __future__ import annotations

from datetime import date

from flask import current_app

from ..errors import DuplicateItemError, NotFoundError, ServiceError
from ..extensions import db
from ..models import Sale, SaleItem
from ..time_utils import day_bounds, utcnow
from . import products_service, stock_ledger, user_service
from .basket import SaleRequest, has_duplicate_products
from .concurrency import lock_for_update, run_with_retry
from .pagination import paginate


def _load_sale_locked(sale_id: int, *, active: bool) -> Sale:
    state = Sale.is_active if active else ~Sale.is_active
    sale = lock_for_update(db.session.query(Sale).filter(Sale.id == sale_id, state)).first()
    if not sale:
        raise NotFoundError(f"Sale {sale_id} not found", details={"sale_id": sale_id})
    return sale


def _sale_items(sale_id: int, *, active: bool) -> list[SaleItem]:
    state = SaleItem.is_active if active else ~SaleItem.is_active
    return (
        db.session.query(SaleItem)
        .filter(SaleItem.sale_id == sale_id, state)
        .order_by(SaleItem.id.asc())
        .all()
    )


def commit_sale(login: str, request: SaleRequest) -> Sale:
    """
    Turn a basket into a committed sale.

    Items are reserved in the order supplied; the first product short on stock
    aborts the whole commit with InsufficientStockError naming that product.
    """
    request.validate()

    def _op():
        user = user_service.find_active_by_login(login)

        if has_duplicate_products(request.items):
            raise DuplicateItemError(
                "A sale cannot contain the same product twice",
                details={"product_ids": [item.product_id for item in request.items]},
            )

        now = utcnow()
        sale = Sale(
            user_id=user.id,
            payment_method=request.payment_method,
            discount_percent=request.discount_percent,
            total_cents=0,
            created_at=now,
        )
        db.session.add(sale)
        db.session.flush()

        total_cents = 0
        for item in request.items:
            product = stock_ledger.reserve(item.product_id, item.quantity)
            db.session.add(SaleItem(
                sale_id=sale.id,
                product_id=product.id,
                quantity=item.quantity,
                unit_price_cents=product.price_cents,
                created_at=now,
            ))
            total_cents += item.quantity * product.price_cents

        sale.total_cents = total_cents
        db.session.commit()
        return sale

    try:
        sale = run_with_retry(_op)
    except ServiceError as exc:
        current_app.logger.warning("Sale rejected for %s: %s %s", login, exc.code, exc.details)
        raise

    current_app.logger.info(
        "Sale %s committed by %s: %s item(s), total_cents=%s",
        sale.id, login, len(request.items), sale.total_cents,
    )
    return sale


def void_sale(sale_id: int) -> Sale:
    """
    Soft-delete an active sale and give its stock back.

    Voiding an already voided sale raises NotFoundError, so stock is never
    released twice.
    """
    def _op():
        sale = _load_sale_locked(sale_id, active=True)
        now = utcnow()

        for item in _sale_items(sale.id, active=True):
            stock_ledger.release(item.product_id, item.quantity)
            item.void(now)

        sale.void(now)
        db.session.commit()
        return sale

    sale = run_with_retry(_op)
    current_app.logger.info("Sale %s voided", sale.id)
    return sale


def restore_sale(sale_id: int) -> Sale:
    """
    Reactivate a voided sale, re-reserving its stock.

    Unlike void this can fail: if any product no longer has enough stock the
    restore is rolled back and the sale stays voided.
    """
    def _op():
        sale = _load_sale_locked(sale_id, active=False)

        for item in _sale_items(sale.id, active=False):
            stock_ledger.reserve(item.product_id, item.quantity, active_only=False)
            item.restore()

        sale.restore()
        db.session.commit()
        return sale

    try:
        sale = run_with_retry(_op)
    except ServiceError as exc:
        current_app.logger.warning("Restore of sale %s rejected: %s %s", sale_id, exc.code, exc.details)
        raise

    current_app.logger.info("Sale %s restored", sale.id)
    return sale


def get_sale(sale_id: int, active: bool = True) -> Sale:
    state = Sale.is_active if active else ~Sale.is_active
    sale = db.session.query(Sale).filter(Sale.id == sale_id, state).first()
    if not sale:
        raise NotFoundError(f"Sale {sale_id} not found", details={"sale_id": sale_id})
    return sale


def list_sales(active: bool = True, page: int | None = None, per_page: int | None = None) -> dict:
    """Active (or voided) sales, newest first."""
    state = Sale.is_active if active else ~Sale.is_active
    query = db.session.query(Sale).filter(state).order_by(Sale.created_at.desc(), Sale.id.desc())
    return paginate(query, page, per_page)


def list_sales_by_date(day: date, active: bool = True) -> list[Sale]:
    """Sales created during the given UTC day."""
    start, end = day_bounds(day)
    state = Sale.is_active if active else ~Sale.is_active
    return (
        db.session.query(Sale)
        .filter(state, Sale.created_at >= start, Sale.created_at <= end)
        .order_by(Sale.created_at.asc(), Sale.id.asc())
        .all()
    )


def sale_details(sale_id: int) -> dict:
    """
    Seller name plus each item's product description and frozen price.

    Voided sales, sellers and products still resolve: details describe history.
    """
    sale = db.session.get(Sale, sale_id)
    if not sale:
        raise NotFoundError(f"Sale {sale_id} not found", details={"sale_id": sale_id})

    seller = user_service.find_user(sale.user_id)
    items = (
        db.session.query(SaleItem)
        .filter(SaleItem.sale_id == sale.id)
        .order_by(SaleItem.id.asc())
        .all()
    )

    rows = []
    for item in items:
        product = products_service.find_product(item.product_id)
        rows.append({
            "product_id": item.product_id,
            "description": product.description,
            "quantity": item.quantity,
            "unit_price_cents": item.unit_price_cents,
            "subtotal_cents": item.subtotal_cents,
        })

    return {
        "sale_id": sale.id,
        "seller_name": seller.name,
        "items": rows,
    }
