"""
Request value parsing shared by services and routes.

Everything here raises errors.ValidationError so callers answer 400 with the
same {"error", "code", "details"} body.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from .errors import ValidationError
from .time_utils import parse_iso_date

# Largest value a signed 64-bit INTEGER column can hold
MAX_INT64 = 2**63 - 1


def strict_int(value: Any, field: str) -> int:
    """
    Integer from an int or a plain-digit string, within the 64-bit range.

    Rejects bools, floats, "12.5", "1e3" and non-ASCII digits.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    number = None
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        digits = value.strip()
        sign = -1 if digits.startswith("-") else 1
        if sign < 0:
            digits = digits[1:]
        if digits.isascii() and digits.isdigit():
            if len(digits) > len(str(MAX_INT64)):
                raise ValidationError(f"{field} is out of range", details={"field": field})
            number = sign * int(digits)
    if number is None:
        raise ValidationError(f"{field} must be an integer")
    if abs(number) > MAX_INT64:
        raise ValidationError(f"{field} is out of range", details={"field": field})
    return number


def require_day(value: Optional[str], field: str = "date") -> date:
    """Calendar day from a required YYYY-MM-DD query parameter."""
    try:
        day = parse_iso_date(value)
    except ValueError:
        raise ValidationError(
            f"{field} must be an ISO-8601 date (YYYY-MM-DD)", details={field: value}
        )
    if day is None:
        raise ValidationError(f"{field} query parameter required")
    return day
