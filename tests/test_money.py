import sys
from decimal import Decimal
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from stalltrack.core.errors import InvalidAmountError
from stalltrack.core.money import MAX_STORED_INTEGER, optional_to_decimal, to_decimal, to_minor_units


@pytest.mark.parametrize(
    "amount, cents",
    [
        (14.5, 1450),
        ("14.50", 1450),
        (" $1,234.56 ", 123456),
        (8, 800),
        (Decimal("0.01"), 1),
        (1.005, 101),
        (0.005, 1),
        (-0.005, -1),
        (2.675, 268),
    ],
)
def test_to_minor_units_rounds_half_away_from_zero(amount, cents):
    assert to_minor_units(amount) == cents


@pytest.mark.parametrize("blank", [None, "", "   "])
def test_blank_amount_is_zero(blank):
    assert to_minor_units(blank) == 0


@pytest.mark.parametrize("bad", ["abc", "12.3.4", float("nan"), float("inf"), "Infinity", True, [1]])
def test_invalid_amount_raises(bad):
    with pytest.raises(InvalidAmountError):
        to_minor_units(bad)


@pytest.mark.parametrize("value", [0, 0.01, 0.1, 14.5, 19.99, 29.0, 1234.56, -3.25, 99999.99])
def test_two_decimal_amounts_survive_the_round_trip(value):
    assert to_decimal(to_minor_units(value)) == value


def test_to_decimal_treats_none_as_zero():
    assert to_decimal(None) == 0
    assert to_decimal(2900) == 29.0
    assert optional_to_decimal(None) is None
    assert optional_to_decimal(200) == 2.0


def test_largest_storable_amount_is_accepted():
    assert to_minor_units("92233720368547758.07") == MAX_STORED_INTEGER


@pytest.mark.parametrize("huge", [1e20, "92233720368547758.08", -(10**18)])
def test_amount_beyond_integer_column_is_rejected(huge):
    with pytest.raises(InvalidAmountError):
        to_minor_units(huge)
