from __future__ import annotations

from datetime import datetime

from sqlalchemy.ext.hybrid import hybrid_property

from ..extensions import db
from pdv.time_utils import utcnow


class SoftDeleteMixin:
    """
    Active/voided state shared by products, users, sales and sale items.

    A record is active while voided_at is NULL. `is_active` works on instances
    and inside queries (`filter(Sale.is_active)`, `filter(~Sale.is_active)`),
    so callers never compare the timestamp themselves.
    """

    voided_at = db.Column(db.DateTime(timezone=True), nullable=True, index=True)

    @hybrid_property
    def is_active(self) -> bool:
        return self.voided_at is None

    @is_active.expression
    def is_active(cls):
        return cls.voided_at.is_(None)

    def void(self, when: datetime | None = None) -> None:
        self.voided_at = when or utcnow()

    def restore(self) -> None:
        self.voided_at = None
