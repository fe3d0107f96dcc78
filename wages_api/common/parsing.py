# wages_api/common/parsing.py
"""Request value coercion shared by the blueprints and services. Bad input raises ValidationError (422)."""
from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from wages_api.common.errors import ValidationError

# Largest values the Numeric(10,2) / Numeric(5,2) columns hold
MONEY_MAX = Decimal("99999999.99")
HOURS_MAX = Decimal("999.99")

_BLANK = (None, "", "null")


def opt_date(val, field_name) -> Optional[date]:
    if val in _BLANK:
        return None
    if not isinstance(val, str):
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")
    try:
        return date.fromisoformat(val.strip())
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")


def opt_int(val, field_name) -> Optional[int]:
    if val in _BLANK:
        return None
    if isinstance(val, bool):
        raise ValidationError(f"{field_name} must be integer")
    try:
        return int(val)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be integer")


def opt_str(val, field_name, lower: bool = False) -> Optional[str]:
    """Trimmed string or None when blank; anything but a string is rejected."""
    if val is None:
        return None
    if not isinstance(val, str):
        raise ValidationError(f"{field_name} must be a string")
    s = val.strip()
    if lower:
        s = s.lower()
    return s or None


def amount(val, field_name, max_value: Decimal = MONEY_MAX) -> Decimal:
    """Non-negative decimal within column range; blank means 0."""
    if val in _BLANK:
        return Decimal("0")
    if isinstance(val, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        d = Decimal(str(val))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not d.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    if d < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    if d > max_value:
        raise ValidationError(f"{field_name} must be <= {max_value}")
    return d
