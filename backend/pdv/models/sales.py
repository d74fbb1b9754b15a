from __future__ import annotations

from ..extensions import db
from pdv.time_utils import to_utc_z, utcnow
from .lifecycle import SoftDeleteMixin

PAYMENT_CARD = "CARD"
PAYMENT_CASH = "CASH"
PAYMENT_PIX = "PIX"
PAYMENT_METHODS = (PAYMENT_CARD, PAYMENT_CASH, PAYMENT_PIX)


class Sale(SoftDeleteMixin, db.Model):
    """
    Committed sale.

    total_cents is the sum of item subtotals frozen at commit time. The
    discount is informational here and only applied by report projections.
    A sale and all of its items are always voided or restored together.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.CheckConstraint(
            "discount_percent >= 0 AND discount_percent <= 100",
            name="ck_sales_discount_range",
        ),
        db.Index("ix_sales_created_voided", "created_at", "voided_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    payment_method = db.Column(db.String(8), nullable=False)
    discount_percent = db.Column(db.Integer, nullable=False, default=0)
    total_cents = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    user = db.relationship("User", backref=db.backref("sales", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "payment_method": self.payment_method,
            "discount_percent": self.discount_percent,
            "total_cents": self.total_cents,
            "created_at": to_utc_z(self.created_at),
            "voided_at": to_utc_z(self.voided_at),
        }


class SaleItem(SoftDeleteMixin, db.Model):
    """Line of a sale; unit_price_cents is the product price snapshot at commit."""
    __tablename__ = "sale_items"
    __table_args__ = (
        db.CheckConstraint("quantity >= 1", name="ck_sale_items_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    sale = db.relationship("Sale", backref=db.backref("items", lazy=True, order_by="SaleItem.id"))
    product = db.relationship("Product")
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def subtotal_cents(self) -> int:
        return self.quantity * self.unit_price_cents

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "subtotal_cents": self.subtotal_cents,
            "created_at": to_utc_z(self.created_at),
            "voided_at": to_utc_z(self.voided_at),
        }
