from __future__ import annotations

import math
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Optional

from ..core.constants import MAX_AMOUNT_DIGITS
from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date

TWO_PLACES = Decimal("0.01")


def clean_text(value: Any) -> str:
    """Trimmed string value, or "" for anything that is not a string."""
    if not isinstance(value, str):
        return ""
    return value.strip()


def require_non_empty(value: Any, field_name: str, *, field: Optional[str] = None) -> str:
    text = clean_text(value)
    if not text:
        message = f"{field_name} is required"
        raise ValidationError(message, {field: message} if field else None)
    return text


def require_min_length(value: Any, field_name: str, min_len: int, *, field: Optional[str] = None) -> str:
    if not isinstance(value, str) or len(value) < min_len:
        message = f"{field_name} must be at least {min_len} characters"
        raise ValidationError(message, {field: message} if field else None)
    return value


def parse_amount(value: Any) -> Optional[Decimal]:
    """Parse a money amount into a Decimal with exactly two places.

    Accepts ints, floats, Decimals and decimal strings. Rounds half-up
    ("12.345" -> 12.35). Returns None for booleans, non-finite or unparsable
    input, anything that does not fit DECIMAL(10,2), and anything that is not
    strictly positive after rounding.
    """

    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            return None
        amount = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        # Decimal() accepts "1_000"; digit grouping is not a valid amount.
        if not text or "_" in text:
            return None
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None

    if not amount.is_finite():
        return None
    if amount != 0 and amount.adjusted() >= MAX_AMOUNT_DIGITS:
        return None

    amount = amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    if amount <= 0 or amount.adjusted() >= MAX_AMOUNT_DIGITS:
        return None
    return amount


def format_amount(amount: Decimal) -> str:
    """Two-decimal string used in every payload ("100.00")."""
    return str(Decimal(amount).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


class FieldErrors:
    """Collects field-level errors so validation reports all of them at once."""

    def __init__(self) -> None:
        self._errors: Dict[str, str] = {}

    def add(self, field: str, message: str) -> None:
        self._errors.setdefault(field, message)

    def require(self, data: Dict[str, Any], field: str, message: str) -> str:
        text = clean_text(data.get(field))
        if not text:
            self.add(field, message)
        return text

    def check_max_length(self, field: str, value: str, max_len: int, label: str) -> None:
        if value and len(value) > max_len:
            self.add(field, f"{label} must be at most {max_len} characters")

    def require_date(self, data: Dict[str, Any], field: str, *, missing: str, invalid: str) -> Optional[date]:
        text = clean_text(data.get(field))
        if not text:
            self.add(field, missing)
            return None
        try:
            return parse_iso_date(text)
        except ValueError:
            self.add(field, invalid)
            return None

    def __bool__(self) -> bool:
        return bool(self._errors)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._errors)

    def raise_if_any(self, message: str = "Invalid input") -> None:
        if self._errors:
            raise ValidationError(message, self._errors)
