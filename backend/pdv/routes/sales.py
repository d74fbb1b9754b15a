# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/pdv/routes/sales.py
"""Sales API routes with role enforcement"""

from flask import Blueprint, request, jsonify, g, current_app

from ..errors import ServiceError
from ..models import MANAGEMENT_ROLES
from ..services import sales_service
from ..services.basket import SaleRequest
from ..validation import require_day
from ..decorators import require_auth, require_role


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("")
@require_auth
def commit_sale_route():
    """
    Commit a basket as a sale attributed to the authenticated user.

    Body: {"payment_method": "CARD|CASH|PIX", "discount_percent": 0..100,
           "items": [{"product_id": int, "quantity": int}]}
    """
    try:
        sale_request = SaleRequest.from_payload(request.get_json(silent=True))
        sale = sales_service.commit_sale(g.current_user.login, sale_request)
        return jsonify({"sale": sale.to_dict()}), 201

    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to commit sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/active")
@require_auth
def list_active_route():
    page = request.args.get("page", type=int)
    per_page = request.args.get("per_page", type=int)
    return jsonify(sales_service.list_sales(active=True, page=page, per_page=per_page)), 200


@sales_bp.get("/inactive")
@require_auth
@require_role(*MANAGEMENT_ROLES)
def list_inactive_route():
    page = request.args.get("page", type=int)
    per_page = request.args.get("per_page", type=int)
    return jsonify(sales_service.list_sales(active=False, page=page, per_page=per_page)), 200


@sales_bp.get("/active/search")
@require_auth
def search_active_route():
    """Active sales of one day: ?date=YYYY-MM-DD"""
    try:
        sales = sales_service.list_sales_by_date(require_day(request.args.get("date")), active=True)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"items": [s.to_dict() for s in sales], "count": len(sales)}), 200


@sales_bp.get("/inactive/search")
@require_auth
@require_role(*MANAGEMENT_ROLES)
def search_inactive_route():
    """Voided sales of one day: ?date=YYYY-MM-DD"""
    try:
        sales = sales_service.list_sales_by_date(require_day(request.args.get("date")), active=False)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"items": [s.to_dict() for s in sales], "count": len(sales)}), 200


@sales_bp.get("/active/<int:sale_id>")
@require_auth
def get_active_route(sale_id: int):
    try:
        sale = sales_service.get_sale(sale_id, active=True)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"sale": sale.to_dict()}), 200


@sales_bp.get("/inactive/<int:sale_id>")
@require_auth
@require_role(*MANAGEMENT_ROLES)
def get_inactive_route(sale_id: int):
    try:
        sale = sales_service.get_sale(sale_id, active=False)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"sale": sale.to_dict()}), 200


@sales_bp.get("/<int:sale_id>/details")
@require_auth
def sale_details_route(sale_id: int):
    try:
        details = sales_service.sale_details(sale_id)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify(details), 200


@sales_bp.delete("/<int:sale_id>")
@require_auth
@require_role(*MANAGEMENT_ROLES)
def void_sale_route(sale_id: int):
    """
    Void a sale and return its stock to the catalog.

    Available to: admin, manager
    """
    try:
        sales_service.void_sale(sale_id)
        return "", 204

    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to void sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.patch("/<int:sale_id>")
@require_auth
@require_role(*MANAGEMENT_ROLES)
def restore_sale_route(sale_id: int):
    """
    Reactivate a voided sale; fails with 409 if stock was consumed meanwhile.

    Available to: admin, manager
    """
    try:
        sales_service.restore_sale(sale_id)
        return "", 204

    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to restore sale")
        return jsonify({"error": "Internal server error"}), 500
