"""Input coercion shared by the ledgers.

Values arrive from JSON (ints, floats, numeric strings). Each helper either
returns a clean ``int`` or raises the ledger error the caller names.
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation

from ..core.errors import LedgerError
from ..core.money import MAX_STORED_INTEGER


def _to_int(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None
    if isinstance(value, (str, Decimal)):
        try:
            number = Decimal(value.strip()) if isinstance(value, str) else value
        except InvalidOperation:
            return None
        if number.is_finite() and number == number.to_integral_value():
            return int(number)
    return None


def as_whole_number(value: object, *, error: type[LedgerError], message: str) -> int:
    """Return ``value`` as an ``int`` if it is a finite whole number that fits a 64-bit column."""

    number = _to_int(value)
    if number is None or abs(number) > MAX_STORED_INTEGER:
        raise error(message, details={"value": value if isinstance(value, (int, str)) else repr(value)})
    return number


def clean_text(value: object) -> str | None:
    """Strip strings; empty and ``None`` become ``None``."""

    if value is None:
        return None
    text = str(value).strip()
    return text or None
