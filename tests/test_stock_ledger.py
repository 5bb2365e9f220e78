import sys
from pathlib import Path

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from stalltrack.core.errors import InsufficientStockError, InvalidQuantityError, NotFoundError
from stalltrack.core.money import MAX_STORED_INTEGER
from stalltrack.db.session import Database
from stalltrack.models.inventory import InventoryAdjustment, Item
from stalltrack.services.stock_ledger import StockLedger


@pytest.fixture()
def database():
    db = Database("sqlite://").open()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def stock(database):
    return StockLedger(database)


def _audit_sum(database, item_id):
    with database.reader() as db:
        return db.execute(
            select(func.coalesce(func.sum(InventoryAdjustment.delta), 0)).where(InventoryAdjustment.item_id == item_id)
        ).scalar_one()


def test_create_item_records_initial_stock(stock, database):
    item = stock.create_item({"name": "  Dragon ", "price": "14.50", "quantity": 10})

    assert item.name == "Dragon"
    assert item.price == 14.5
    assert item.quantity == 10
    trail = stock.list_adjustments(item.id)
    assert [(row.delta, row.reason) for row in trail] == [(10, "initial stock")]


def test_create_item_requires_name(stock):
    with pytest.raises(ValueError):
        stock.create_item({"name": "   "})


def test_adjust_quantity_restock_and_write_off(stock):
    item = stock.create_item({"name": "Owl", "price": 6, "quantity": 3})

    assert stock.adjust_quantity(item.id, 5, "restock").quantity == 8
    assert stock.adjust_quantity(item.id, -2, "broken in transit").quantity == 6

    trail = stock.list_adjustments(item.id)
    assert [(row.delta, row.reason) for row in trail] == [
        (-2, "broken in transit"),
        (5, "restock"),
        (3, "initial stock"),
    ]


def test_adjust_quantity_defaults_reason_to_manual(stock):
    item = stock.create_item({"name": "Owl"})
    stock.adjust_quantity(item.id, 1, None)
    assert stock.list_adjustments(item.id)[0].reason == "manual"


def test_adjust_quantity_below_zero_is_rejected_and_leaves_stock(stock):
    item = stock.create_item({"name": "Frog", "quantity": 1})

    with pytest.raises(InsufficientStockError):
        stock.adjust_quantity(item.id, -2)

    assert stock.get_item(item.id).quantity == 1
    assert len(stock.list_adjustments(item.id)) == 1


@pytest.mark.parametrize("delta", [0, 1.5, "two", None, True])
def test_adjust_quantity_rejects_bad_delta(stock, delta):
    item = stock.create_item({"name": "Frog", "quantity": 1})
    with pytest.raises(InvalidQuantityError):
        stock.adjust_quantity(item.id, delta)


def test_adjust_quantity_unknown_item(stock):
    with pytest.raises(NotFoundError):
        stock.adjust_quantity(999, 1)


def test_quantity_never_negative_and_audit_matches_over_a_sequence(stock, database):
    item = stock.create_item({"name": "Cube", "quantity": 2})
    deltas = [3, -4, -2, 5, -1, -10, 4, -7, 1]

    for delta in deltas:
        try:
            current = stock.adjust_quantity(item.id, delta).quantity
        except InsufficientStockError:
            current = stock.get_item(item.id).quantity
        assert current >= 0
        assert _audit_sum(database, item.id) == current


def test_update_item_records_quantity_edit_as_adjustment(stock, database):
    item = stock.create_item({"name": "Cat", "price": 5, "quantity": 4, "tag": "new"})

    updated = stock.update_item(item.id, {"quantity": 9, "price": "7.25", "tag": None})

    assert updated.quantity == 9
    assert updated.price == 7.25
    assert updated.tag is None
    assert stock.list_adjustments(item.id)[0].delta == 5
    assert stock.list_adjustments(item.id)[0].reason == "manual edit"
    assert _audit_sum(database, item.id) == 9


def test_update_item_without_quantity_change_adds_no_adjustment(stock):
    item = stock.create_item({"name": "Cat", "quantity": 4})
    stock.update_item(item.id, {"name": "Cat XL", "quantity": 4})
    assert stock.get_item(item.id).name == "Cat XL"
    assert len(stock.list_adjustments(item.id)) == 1


def test_create_item_with_unknown_default_filament(stock):
    with pytest.raises(NotFoundError):
        stock.create_item({"name": "Vase", "default_filament_id": 42})


def test_low_stock_lists_emptiest_first(stock):
    stock.create_item({"name": "Plenty", "quantity": 20})
    stock.create_item({"name": "Few", "quantity": 3})
    stock.create_item({"name": "None left", "quantity": 0})

    names = [item.name for item in stock.low_stock(5)]
    assert names == ["None left", "Few"]


@pytest.mark.parametrize("delta", [10**20, 1e20, "-100000000000000000000"])
def test_adjust_quantity_rejects_delta_beyond_integer_column(stock, delta):
    item = stock.create_item({"name": "Frog", "quantity": 1})

    with pytest.raises(InvalidQuantityError):
        stock.adjust_quantity(item.id, delta)

    assert stock.get_item(item.id).quantity == 1
    assert len(stock.list_adjustments(item.id)) == 1


def test_restock_past_the_storable_maximum_is_rejected(stock):
    item = stock.create_item({"name": "Bulk pin", "quantity": MAX_STORED_INTEGER})

    with pytest.raises(InvalidQuantityError):
        stock.adjust_quantity(item.id, 1)

    assert stock.get_item(item.id).quantity == MAX_STORED_INTEGER


def test_items_with_history_cannot_be_deleted_underneath_the_ledger(stock, database):
    item = stock.create_item({"name": "Frog", "quantity": 3})

    with pytest.raises(IntegrityError):
        with database.unit_of_work() as db:
            db.execute(delete(Item).where(Item.id == item.id))

    assert stock.get_item(item.id).quantity == 3
    assert len(stock.list_adjustments(item.id)) == 1
