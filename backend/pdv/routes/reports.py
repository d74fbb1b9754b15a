# Overview: Flask API routes for report projections (JSON only).

from flask import Blueprint, request, jsonify

from ..errors import ServiceError
from ..services import reporting_service
from ..validation import require_day
from ..decorators import require_auth

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/sales/<int:sale_id>")
@require_auth
def sale_receipt_route(sale_id: int):
    try:
        receipt = reporting_service.sale_receipt(sale_id)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify(receipt), 200


@reports_bp.get("/sales")
@require_auth
def daily_sales_route():
    """Daily summary: ?date=YYYY-MM-DD"""
    try:
        day = require_day(request.args.get("date"))
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify(reporting_service.daily_sales_report(day)), 200


@reports_bp.get("/stock")
@require_auth
def stock_route():
    return jsonify(reporting_service.stock_report()), 200
