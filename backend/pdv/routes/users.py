# Overview: Flask API routes for staff accounts.

from flask import Blueprint, request, jsonify, g

from ..errors import ServiceError
from ..models import MANAGEMENT_ROLES
from ..services import user_service
from ..decorators import require_auth, require_role

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.post("")
@require_auth
@require_role(*MANAGEMENT_ROLES)
def create_user_route():
    """Body: {"name", "login", "password", "role": "MANAGER|SELLER"}"""
    data = request.get_json(silent=True) or {}
    try:
        user = user_service.create_user(
            name=data.get("name"),
            login=data.get("login"),
            password=data.get("password"),
            role=data.get("role") or "",
        )
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"user": user.to_dict()}), 201


@users_bp.get("/active")
@require_auth
def list_active_route():
    page = request.args.get("page", type=int)
    per_page = request.args.get("per_page", type=int)
    return jsonify(user_service.list_users(active=True, page=page, per_page=per_page)), 200


@users_bp.get("/inactive")
@require_auth
@require_role(*MANAGEMENT_ROLES)
def list_inactive_route():
    page = request.args.get("page", type=int)
    per_page = request.args.get("per_page", type=int)
    return jsonify(user_service.list_users(active=False, page=page, per_page=per_page)), 200


@users_bp.get("/active/<int:user_id>")
@require_auth
def get_active_route(user_id: int):
    try:
        user = user_service.find_active_user(user_id)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"user": user.to_dict()}), 200


@users_bp.get("/inactive/<int:user_id>")
@require_auth
@require_role(*MANAGEMENT_ROLES)
def get_inactive_route(user_id: int):
    try:
        user = user_service.find_inactive_user(user_id)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"user": user.to_dict()}), 200


@users_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"user": g.current_user.to_dict()}), 200


@users_bp.put("/me")
@require_auth
def update_me_route():
    data = request.get_json(silent=True) or {}
    try:
        user = user_service.update_user(
            g.current_user.login,
            name=data.get("name"),
            login=data.get("login"),
            password=data.get("password"),
        )
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"user": user.to_dict()}), 200


@users_bp.delete("/<int:user_id>")
@require_auth
@require_role(*MANAGEMENT_ROLES)
def deactivate_user_route(user_id: int):
    try:
        user_service.deactivate_user(g.current_user.login, user_id)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return "", 204


@users_bp.patch("/<int:user_id>")
@require_auth
@require_role(*MANAGEMENT_ROLES)
def reactivate_user_route(user_id: int):
    try:
        user_service.reactivate_user(user_id)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return "", 204
