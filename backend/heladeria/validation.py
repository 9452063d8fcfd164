from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any


# Maximum price: $9,999,999.99 (999,999,999 cents)
# This prevents database overflow issues and nonsensical prices
MAX_PRICE_CENTS = 999_999_999

_CENTS = Decimal("0.01")


class ValidationError(ValueError):
    """400-level input problem."""


def _to_decimal(value: Any, field: str) -> Decimal:
    # bool is a subclass of int; "true" is never a price
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, (int, float, Decimal)):
        raw = str(value)
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            raise ValidationError(f"{field} must be a number")
    else:
        raise ValidationError(f"{field} must be a number")

    try:
        amount = Decimal(raw)
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    return amount


def require_object(value: Any, field: str = "request body") -> dict:
    """A missing body reads as {}; any other non-object JSON is rejected."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationError(f"{field} must be a JSON object")
    return value


def parse_money_cents(value: Any, field: str = "price") -> int:
    """
    Parse a client-supplied decimal amount ("12", 12.5, "12.50") into integer cents.

    Rounds half-up to the cent. Rejects negatives and amounts above MAX_PRICE_CENTS.
    """
    if value is None:
        raise ValidationError(f"{field} is required")

    amount = _to_decimal(value, field)
    if amount < 0:
        raise ValidationError(f"{field} must be >= 0")

    cents = int((amount.quantize(_CENTS, rounding=ROUND_HALF_UP) * 100).to_integral_value())
    if cents > MAX_PRICE_CENTS:
        raise ValidationError(f"{field} cannot exceed {MAX_PRICE_CENTS / 100:,.2f}")
    return cents


def parse_optional_money_cents(value: Any, field: str) -> int | None:
    if value is None:
        return None
    return parse_money_cents(value, field)


def parse_quantity(value: Any, field: str = "quantity") -> int:
    """Strict positive integer; rejects bools, decimals and scientific notation."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        qty = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{field} must be an integer, not a decimal")
        qty = int(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped.lstrip("-").isdigit():
            raise ValidationError(f"{field} must be an integer")
        qty = int(stripped)
    else:
        raise ValidationError(f"{field} must be an integer")

    if qty <= 0:
        raise ValidationError(f"{field} must be > 0")
    return qty


def parse_bool(value: Any, field: str) -> bool:
    """Accept JSON booleans and the 0/1 integers the front-end historically sent."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in ("0", "1", "true", "false"):
        return value.strip().lower() in ("1", "true")
    raise ValidationError(f"{field} must be a boolean")


def require_text(value: Any, field: str, *, max_length: int | None = None) -> str:
    if value is None:
        raise ValidationError(f"{field} is required")
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        raise ValidationError(f"{field} must be a string")
    text = str(value).strip()
    if not text:
        raise ValidationError(f"{field} cannot be blank")
    if max_length and len(text) > max_length:
        raise ValidationError(f"{field} exceeds max length {max_length}")
    return text


def optional_text(value: Any, field: str, *, max_length: int | None = None) -> str | None:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return require_text(value, field, max_length=max_length)


def cents_to_amount(cents: int | None) -> float | None:
    """JSON-facing decimal amount for a stored cents value."""
    if cents is None:
        return None
    return float(Decimal(cents) / 100)
