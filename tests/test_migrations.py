import sys
from pathlib import Path

from sqlalchemy import create_engine, inspect, text

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from stalltrack.db.migrate import run_migrations
from stalltrack.db.session import Database
from stalltrack.services.sale_recorder import SaleRecorder
from stalltrack.services.stock_ledger import StockLedger

LEGACY_SCHEMA = [
    """
    CREATE TABLE items (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT,
        price_cents INTEGER NOT NULL DEFAULT 0,
        quantity INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE sales_sessions (
        id INTEGER PRIMARY KEY,
        title TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'open',
        started_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE sales (
        id INTEGER PRIMARY KEY,
        session_id INTEGER NOT NULL,
        item_id INTEGER NOT NULL,
        quantity INTEGER NOT NULL,
        unit_price_cents INTEGER NOT NULL,
        total_price_cents INTEGER NOT NULL
    )
    """,
    "INSERT INTO items (id, name, price_cents, quantity, created_at) VALUES (1, 'Dragon', 1450, 8, '2024-01-02T10:00:00Z')",
    "INSERT INTO sales_sessions (id, title, status, started_at) VALUES (1, 'Old market', 'closed', '2024-01-06T14:00:00Z')",
    "INSERT INTO sales (id, session_id, item_id, quantity, unit_price_cents, total_price_cents) VALUES (1, 1, 1, 2, 1450, 2900)",
]


def _legacy_database(path: Path) -> str:
    url = f"sqlite:///{path}"
    engine = create_engine(url)
    with engine.begin() as conn:
        for statement in LEGACY_SCHEMA:
            conn.execute(text(statement))
    engine.dispose()
    return url


def test_open_upgrades_a_legacy_database(tmp_path):
    url = _legacy_database(tmp_path / "legacy.sqlite")

    database = Database(url).open()
    try:
        columns = {col["name"] for col in inspect(database.engine).get_columns("sales")}
        assert {"payment_method", "cash_received_cents", "change_given_cents", "sold_at", "note"} <= columns
        assert "filament_spools" in inspect(database.engine).get_table_names()

        stock = StockLedger(database)
        item = stock.get_item(1)
        assert item.updated_at == "2024-01-02T10:00:00Z"
        assert item.total_sold == 2

        sale = SaleRecorder(database, stock).get_sale(1)
        assert sale.payment_method == "card"
        assert sale.sold_at == "2024-01-06T14:00:00Z"
    finally:
        database.close()


def test_migrations_are_idempotent(tmp_path):
    url = _legacy_database(tmp_path / "legacy.sqlite")
    database = Database(url).open()
    try:
        assert run_migrations(database.engine) == []
    finally:
        database.close()
