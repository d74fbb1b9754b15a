# Overview: Read-only report projections for receipts, daily sales and stock.

from __future__ import annotations

from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from ..errors import NotFoundError
from ..extensions import db
from ..models import Product, Sale, User, PAYMENT_CARD, PAYMENT_CASH, PAYMENT_PIX
from ..time_utils import to_utc_z
from . import sales_service

PAYMENT_LABELS = {
    PAYMENT_CARD: "Card",
    PAYMENT_CASH: "Cash",
    PAYMENT_PIX: "PIX",
}


def discount_cents(total_cents: int, discount_percent: int) -> int:
    """Discount amount in cents, rounded half-up."""
    amount = Decimal(total_cents) * Decimal(discount_percent) / Decimal(100)
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def net_total_cents(sale: Sale) -> int:
    return sale.total_cents - discount_cents(sale.total_cents, sale.discount_percent)


def sale_receipt(sale_id: int) -> dict:
    """
    Receipt for one sale.

    The stored total is pre-discount; the discount is applied here, on the
    way out, and never written back.
    """
    sale = db.session.get(Sale, sale_id)
    if not sale:
        raise NotFoundError(f"Sale {sale_id} not found", details={"sale_id": sale_id})

    details = sales_service.sale_details(sale.id)
    discount = discount_cents(sale.total_cents, sale.discount_percent)

    return {
        "sale_id": sale.id,
        "seller_name": details["seller_name"],
        "payment_method": PAYMENT_LABELS.get(sale.payment_method, sale.payment_method),
        "created_at": to_utc_z(sale.created_at),
        "voided_at": to_utc_z(sale.voided_at),
        "discount_percent": sale.discount_percent,
        "subtotal_cents": sale.total_cents,
        "discount_cents": discount,
        "total_cents": sale.total_cents - discount,
        "items": details["items"],
    }


def daily_sales_report(day: date) -> dict:
    """Active sales of one UTC day with their net totals."""
    sales = sales_service.list_sales_by_date(day, active=True)
    user_ids = {sale.user_id for sale in sales}
    names = {}
    if user_ids:
        names = {
            user.id: user.name
            for user in db.session.query(User).filter(User.id.in_(user_ids)).all()
        }

    rows = []
    grand_total = 0
    for sale in sales:
        net = net_total_cents(sale)
        grand_total += net
        rows.append({
            "sale_id": sale.id,
            "seller_name": names.get(sale.user_id),
            "payment_method": PAYMENT_LABELS.get(sale.payment_method, sale.payment_method),
            "total_cents": net,
            "created_at": to_utc_z(sale.created_at),
        })

    return {
        "date": day.isoformat(),
        "sales": rows,
        "count": len(rows),
        "total_cents": grand_total,
    }


def stock_report() -> dict:
    """On-hand quantity of every active product."""
    products = (
        db.session.query(Product)
        .filter(Product.is_active)
        .order_by(Product.id.asc())
        .all()
    )
    return {
        "items": [
            {"id": p.id, "description": p.description, "quantity": p.quantity}
            for p in products
        ],
        "count": len(products),
    }
