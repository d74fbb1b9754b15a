from __future__ import annotations

from ..extensions import db
from pdv.time_utils import to_utc_z, utcnow
from .lifecycle import SoftDeleteMixin

ROLE_ADMIN = "ADMIN"
ROLE_MANAGER = "MANAGER"
ROLE_SELLER = "SELLER"
ROLES = (ROLE_ADMIN, ROLE_MANAGER, ROLE_SELLER)

# Roles allowed to void/restore sales and edit the catalog
MANAGEMENT_ROLES = (ROLE_ADMIN, ROLE_MANAGER)


class User(SoftDeleteMixin, db.Model):
    """
    Staff account.

    WHY: Every sale is attributed to the user who committed it. A voided user
    can no longer authenticate or sell, but keeps ownership of past sales.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("login", name="uq_users_login"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    login = db.Column(db.String(64), nullable=False, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(16), nullable=False, default=ROLE_SELLER)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    @property
    def is_manager(self) -> bool:
        return self.role in MANAGEMENT_ROLES

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "login": self.login,
            "role": self.role,
            "created_at": to_utc_z(self.created_at),
            "voided_at": to_utc_z(self.voided_at),
        }
