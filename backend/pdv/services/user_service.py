# Overview: Service-layer operations for staff accounts and authentication.

"""
Staff accounts.

WHY: Every sale is attributed to an authenticated user. Uses bcrypt for
password hashing and validates password strength.

RULES:
- ADMIN accounts are bootstrap-only (CLI); the API cannot create them
- Logins are unique across active and voided accounts
- A user cannot deactivate their own account
- A MANAGER may only deactivate SELLER accounts
"""

from __future__ import annotations

import re

import bcrypt
from flask import current_app

from ..errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from ..extensions import db
from ..models import User, ROLES, ROLE_ADMIN, ROLE_MANAGER, ROLE_SELLER
from .pagination import paginate


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character (!@#$%^&*(),.'":{}|<>)
    """
    if not isinstance(password, str) or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str) -> str:
    """Hash password using bcrypt with the configured cost factor."""
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt check. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def _require_role(role: str) -> str:
    role = (role or "").strip().upper()
    if role not in ROLES:
        raise ValidationError("role must be one of: " + ", ".join(ROLES), details={"role": role})
    return role


def _require_text(value, field: str, max_length: int) -> str:
    text = str(value or "").strip()
    if not text:
        raise ValidationError(f"{field} is required")
    if len(text) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return text


def _login_taken(login: str, exclude_user_id: int | None = None) -> bool:
    query = db.session.query(User).filter(User.login == login)
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    return db.session.query(query.exists()).scalar()


def find_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found", details={"user_id": user_id})
    return user


def find_active_user(user_id: int) -> User:
    user = db.session.query(User).filter(User.id == user_id, User.is_active).first()
    if user is None:
        raise NotFoundError(f"User {user_id} not found", details={"user_id": user_id})
    return user


def find_inactive_user(user_id: int) -> User:
    user = db.session.query(User).filter(User.id == user_id, ~User.is_active).first()
    if user is None:
        raise NotFoundError(f"User {user_id} not found", details={"user_id": user_id})
    return user


def find_active_by_login(login: str) -> User:
    user = db.session.query(User).filter(User.login == login, User.is_active).first()
    if user is None:
        raise NotFoundError(f"User {login} not found", details={"login": login})
    return user


def list_users(active: bool = True, page: int | None = None, per_page: int | None = None) -> dict:
    state = User.is_active if active else ~User.is_active
    query = db.session.query(User).filter(state).order_by(User.name.asc(), User.id.asc())
    return paginate(query, page, per_page)


def create_user(
    name: str,
    login: str,
    password: str,
    role: str = ROLE_SELLER,
    *,
    allow_admin: bool = False,
) -> User:
    """
    Create a staff account with a bcrypt password hash.

    allow_admin is only set by the bootstrap CLI.
    """
    name = _require_text(name, "name", 120)
    login = _require_text(login, "login", 64)
    role = _require_role(role)

    if role == ROLE_ADMIN and not allow_admin:
        raise PermissionDeniedError("ADMIN accounts cannot be created through the API")

    if _login_taken(login):
        raise ConflictError(f"Login {login} is already in use", details={"login": login})

    user = User(
        name=name,
        login=login,
        password_hash=hash_password(password),
        role=role,
    )
    db.session.add(user)
    db.session.commit()
    return user


def authenticate(login: str, password: str) -> User | None:
    """Active user matching the credentials, or None."""
    if not login or not password:
        return None
    user = db.session.query(User).filter(User.login == login, User.is_active).first()
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def update_user(acting_login: str, *, name: str, login: str, password: str) -> User:
    """
    Update the acting user's own name, login and password.

    Roles are not self-editable.
    """
    user = find_active_by_login(acting_login)
    name = _require_text(name, "name", 120)
    login = _require_text(login, "login", 64)

    if _login_taken(login, exclude_user_id=user.id):
        raise ConflictError(f"Login {login} is already in use", details={"login": login})

    user.name = name
    user.login = login
    user.password_hash = hash_password(password)
    db.session.commit()
    return user


def deactivate_user(acting_login: str, user_id: int) -> User:
    acting = find_active_by_login(acting_login)
    target = find_active_user(user_id)

    if acting.id == target.id:
        raise ConflictError(f"User {acting_login} is in use and cannot be deactivated")

    if acting.role == ROLE_MANAGER and target.role != ROLE_SELLER:
        raise PermissionDeniedError(
            f"User {acting_login} cannot deactivate a {target.role} account",
            details={"user_id": target.id},
        )

    target.void()
    db.session.commit()
    return target


def reactivate_user(user_id: int) -> User:
    user = find_inactive_user(user_id)
    user.restore()
    db.session.commit()
    return user
