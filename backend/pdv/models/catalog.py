from __future__ import annotations

from ..extensions import db
from pdv.time_utils import to_utc_z, utcnow
from .lifecycle import SoftDeleteMixin


class Product(SoftDeleteMixin, db.Model):
    """
    Catalog entry.

    quantity is the on-hand stock. Only services.stock_ledger writes it; the
    CHECK constraint is the last line behind that rule.

    Prices are integer cents (175090 == 1750.90).
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
        db.CheckConstraint("price_cents >= 0", name="ck_products_price_non_negative"),
        db.Index("ix_products_description", "description"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    description = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    price_cents = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} description={self.description!r} quantity={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "quantity": self.quantity,
            "price_cents": self.price_cents,
            "created_at": to_utc_z(self.created_at),
            "voided_at": to_utc_z(self.voided_at),
        }
