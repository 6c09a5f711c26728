"""Validation and sanitization helpers for inquiry payloads."""

import math
from datetime import date, datetime
from typing import Any, Optional

from inquiry_resolution.utils.error_handling import ValidationError


def ensure_present(value: Any, field: str) -> None:
    """Raise ValidationError if value is falsy."""
    if value in (None, "", []):
        raise ValidationError(f"{field} is required")


def is_blank(value: Any) -> bool:
    """True for None and whitespace-only strings."""
    return value is None or (isinstance(value, str) and not value.strip())


def parse_numeric(value: Any, field: str) -> Optional[float]:
    """
    Empty input becomes None, anything else must parse to a finite float.

    Invalid text is a caller error; it is never silently zeroed.
    """
    if is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise ValidationError(f"{field} must be a number, got {value!r}") from None
    else:
        raise ValidationError(f"{field} must be a number")

    if not math.isfinite(number):
        raise ValidationError(f"{field} must be a finite number")
    return number


def parse_date(value: Any, field: str) -> Optional[date]:
    """
    Empty input becomes None; an ISO date or ISO timestamp becomes a date.

    The whole string must parse. A timestamp keeps its calendar day.
    """
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            raise ValidationError(f"{field} must be a date (YYYY-MM-DD), got {value!r}") from None
    raise ValidationError(f"{field} must be a date")
