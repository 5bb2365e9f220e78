"""Currency codec: decimal amounts at the edges, integer cents everywhere else.

Every price, total, cash amount and spool cost is stored and summed as an
integer count of minor units. Amounts only become decimals again when they
leave the service (API responses), via ``to_decimal``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .errors import InvalidAmountError

_HUNDRED = Decimal(100)

# SQLite stores INTEGER as a signed 64-bit value.
MAX_STORED_INTEGER = 2**63 - 1


def _parse_decimal(amount: object) -> Decimal:
    if isinstance(amount, bool):
        raise InvalidAmountError("Invalid currency amount", details={"amount": amount})
    if isinstance(amount, Decimal):
        value = amount
    elif isinstance(amount, int):
        value = Decimal(amount)
    elif isinstance(amount, float):
        # str() gives the shortest repr, so 14.5 becomes Decimal("14.5") and
        # not the binary expansion of the float.
        value = Decimal(str(amount))
    elif isinstance(amount, str):
        cleaned = amount.strip().replace("$", "").replace(",", "")
        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            raise InvalidAmountError("Invalid currency amount", details={"amount": amount}) from None
    else:
        raise InvalidAmountError("Invalid currency amount", details={"amount": repr(amount)})
    if not value.is_finite():
        raise InvalidAmountError("Invalid currency amount", details={"amount": str(amount)})
    return value


def to_minor_units(amount: object) -> int:
    """Convert a decimal amount (number or numeric string) to integer cents.

    ``None`` and ``""`` mean "no charge specified" and yield ``0``. Half cents
    round away from zero. Anything that is not a finite number, or whose cents
    do not fit a 64-bit INTEGER column, raises ``InvalidAmountError``.
    """

    if is_blank(amount):
        return 0
    value = _parse_decimal(amount)
    try:
        # ROUND_HALF_UP in ``decimal`` rounds ties away from zero for negatives too.
        cents = (value * _HUNDRED).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmountError("Currency amount out of range", details={"amount": str(amount)}) from None
    if abs(cents) > MAX_STORED_INTEGER:
        raise InvalidAmountError("Currency amount out of range", details={"amount": str(amount)})
    return int(cents)


def to_decimal(minor_units: int | None) -> float:
    """Convert integer cents back to a decimal number; ``None`` yields ``0``."""

    if minor_units is None:
        return 0.0
    return int(minor_units) / 100


def optional_to_decimal(minor_units: int | None) -> float | None:
    if minor_units is None:
        return None
    return to_decimal(minor_units)


def is_blank(amount: object) -> bool:
    """True when a money field was left out rather than set to zero."""

    return amount is None or (isinstance(amount, str) and not amount.strip())


__all__ = ["MAX_STORED_INTEGER", "to_minor_units", "to_decimal", "optional_to_decimal", "is_blank"]
