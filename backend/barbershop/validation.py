from __future__ import annotations

from datetime import date
from typing import Any

from .errors import ValidationError
from barbershop.time_utils import parse_iso_date


# Maximum amount: 9,999,999.99 (999,999,999 cents)
# This prevents database overflow issues and nonsensical prices
MAX_AMOUNT_CENTS = 999_999_999


def require_text(value: Any, field: str, *, max_length: int | None = None) -> str:
    """Non-empty stripped string."""
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required", details={"field": field})
    text = str(value).strip()
    if max_length is not None and len(text) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters", details={"field": field})
    return text


def optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def coerce_int(value: Any, field: str, *, minimum: int | None = None, maximum: int | None = None) -> int:
    """
    Strict integer coercion for JSON / form input.

    Rejects bools, floats, decimals and scientific notation rather than
    silently truncating them.
    """
    if value is None:
        raise ValidationError(f"{field} is required", details={"field": field})

    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer", details={"field": field})
    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        stripped = value.strip()
        # Reject scientific notation (e.g., "1e15") and decimals (e.g., "12.5")
        if not stripped or "e" in stripped.lower() or "." in stripped:
            raise ValidationError(f"{field} must be an integer", details={"field": field})
        try:
            result = int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer", details={"field": field})
    else:
        raise ValidationError(f"{field} must be an integer", details={"field": field})

    if minimum is not None and result < minimum:
        raise ValidationError(f"{field} must be at least {minimum}", details={"field": field})
    if maximum is not None and result > maximum:
        raise ValidationError(f"{field} must be at most {maximum}", details={"field": field})
    return result


def coerce_cents(value: Any, field: str, *, minimum: int = 0) -> int:
    return coerce_int(value, field, minimum=minimum, maximum=MAX_AMOUNT_CENTS)


def coerce_bool(value: Any, field: str) -> bool:
    """Accept real booleans and the usual true/false spellings; reject the rest."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "1", "yes", "on"):
            return True
        if text in ("false", "0", "no", "off"):
            return False
    raise ValidationError(f"{field} must be true or false", details={"field": field})


def coerce_enum(enum_cls, value: Any, field: str):
    """Map a raw value onto a closed enum, or raise ValidationError listing the options."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field} must be one of: {allowed}", details={"field": field}) from None


def coerce_choice(value: Any, field: str, choices) -> str:
    text = require_text(value, field).lower()
    if text not in choices:
        raise ValidationError(f"{field} must be one of: {', '.join(choices)}", details={"field": field})
    return text


def coerce_date(value: Any, field: str) -> date:
    if isinstance(value, date):
        return value
    try:
        parsed = parse_iso_date(value if isinstance(value, str) else None)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"{field} must be a YYYY-MM-DD date", details={"field": field})
    return parsed
