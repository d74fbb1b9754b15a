"""
Service error taxonomy.

Every error raised by the service layer derives from ServiceError so routes can
translate it with a single except clause. `code` is the stable machine-readable
kind; `status_code` is the HTTP status the API answers with.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for expected, client-attributable failures."""

    code = "SERVICE_ERROR"
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code, "details": self.details}


class ValidationError(ServiceError):
    """400-level input problem (out-of-range discount, quantity, price...)."""

    code = "INVALID_ARGUMENT"
    status_code = 400


class NotFoundError(ServiceError):
    """Referenced record is absent or not in the state the operation expects."""

    code = "NOT_FOUND"
    status_code = 404


class DuplicateItemError(ServiceError):
    """A basket references the same product more than once."""

    code = "DUPLICATE_ITEM"
    status_code = 400


class InsufficientStockError(ServiceError):
    """Requested quantity exceeds a product's quantity on hand."""

    code = "INSUFFICIENT_STOCK"
    status_code = 409

    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            f"Product {product_id} does not have enough stock",
            details={
                "product_id": product_id,
                "requested_quantity": requested,
                "on_hand": available,
            },
        )
        self.product_id = product_id


class ConflictError(ServiceError):
    """409-level business rule conflict (e.g., description or login in use)."""

    code = "CONFLICT"
    status_code = 409


class PermissionDeniedError(ServiceError):
    """Actor lacks the role needed for the operation."""

    code = "PERMISSION_DENIED"
    status_code = 403


class ConcurrentUpdateError(ServiceError):
    """Optimistic lock kept failing after every retry attempt."""

    code = "CONCURRENT_UPDATE"
    status_code = 409
