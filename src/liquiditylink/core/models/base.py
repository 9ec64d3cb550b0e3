"""Shared helpers for domain models."""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from liquiditylink.exceptions import InvalidInputError


def _utcnow() -> datetime:
    """Get current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


def to_decimal(value: Any, field: str, *, non_negative: bool = True) -> Decimal:
    """Coerce a numeric value to Decimal, failing fast on bad input.

    Args:
        value: int, float, str or Decimal
        field: Field name reported in the error
        non_negative: Reject values below zero

    Returns:
        Finite Decimal

    Raises:
        InvalidInputError: If the value is missing, not numeric, not finite
            or negative when ``non_negative`` is set
    """
    if value is None or isinstance(value, bool):
        raise InvalidInputError(f"{field} is required and must be numeric", field=field)
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise InvalidInputError(f"{field} must be numeric, got {value!r}", field=field)

    if not result.is_finite():
        raise InvalidInputError(f"{field} must be finite, got {value!r}", field=field)
    if non_negative and result < 0:
        raise InvalidInputError(f"{field} must be non-negative, got {value!r}", field=field)
    return result


def require_text(value: Any, field: str) -> str:
    """Ensure an identifier field is a non-empty string."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{field} must be a non-empty string", field=field)
    return value


def parse_datetime(value: Any, field: str) -> datetime:
    """Parse a datetime, unix timestamp or ISO string into an aware datetime."""
    if isinstance(value, datetime):
        result = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        result = datetime.fromtimestamp(value, tz=timezone.utc)
    elif isinstance(value, str):
        try:
            result = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise InvalidInputError(f"{field} is not a valid timestamp: {value!r}", field=field)
    else:
        raise InvalidInputError(f"{field} must be a timestamp, got {value!r}", field=field)

    if result.tzinfo is None:
        result = result.replace(tzinfo=timezone.utc)
    return result


def optional_str(value: Any) -> Any:
    """Decimal-to-string for optional serialized fields."""
    return str(value) if value is not None else None
