# Overview: Flask API routes for catalog operations; parses input and returns JSON responses.

# backend/pdv/routes/products.py
"""
Product management routes.

SECURITY: All routes require authentication.
- Reads of active products are open to every role
- Writes and reads of voided products require ADMIN or MANAGER
"""
from flask import Blueprint, request, jsonify

from ..errors import ServiceError
from ..models import MANAGEMENT_ROLES
from ..services import products_service
from ..decorators import require_auth, require_role

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("/active")
@require_auth
def list_active_route():
    page = request.args.get("page", type=int)
    per_page = request.args.get("per_page", type=int)
    return jsonify(products_service.list_products(active=True, page=page, per_page=per_page)), 200


@products_bp.get("/inactive")
@require_auth
@require_role(*MANAGEMENT_ROLES)
def list_inactive_route():
    page = request.args.get("page", type=int)
    per_page = request.args.get("per_page", type=int)
    return jsonify(products_service.list_products(active=False, page=page, per_page=per_page)), 200


@products_bp.get("/active/<int:product_id>")
@require_auth
def get_active_route(product_id: int):
    try:
        product = products_service.find_active_product(product_id)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"product": product.to_dict()}), 200


@products_bp.get("/inactive/<int:product_id>")
@require_auth
@require_role(*MANAGEMENT_ROLES)
def get_inactive_route(product_id: int):
    try:
        product = products_service.find_inactive_product(product_id)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"product": product.to_dict()}), 200


@products_bp.post("")
@require_auth
@require_role(*MANAGEMENT_ROLES)
def create_product_route():
    """Body: {"description": str, "quantity": int, "price_cents": int}"""
    try:
        product = products_service.create_product(request.get_json(silent=True))
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"product": product.to_dict()}), 201


@products_bp.put("/<int:product_id>")
@require_auth
@require_role(*MANAGEMENT_ROLES)
def update_product_route(product_id: int):
    try:
        product = products_service.update_product(product_id, request.get_json(silent=True))
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"product": product.to_dict()}), 200


@products_bp.delete("/<int:product_id>")
@require_auth
@require_role(*MANAGEMENT_ROLES)
def deactivate_product_route(product_id: int):
    try:
        products_service.deactivate_product(product_id)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return "", 204


@products_bp.patch("/<int:product_id>")
@require_auth
@require_role(*MANAGEMENT_ROLES)
def reactivate_product_route(product_id: int):
    try:
        products_service.reactivate_product(product_id)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return "", 204
