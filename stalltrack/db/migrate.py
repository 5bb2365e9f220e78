"""Tiny home-grown migration helpers for SQLite.

``Base.metadata.create_all`` builds fresh databases. Older databases created
before a column existed are upgraded here, additively: columns are only ever
added, never dropped or rewritten.
"""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

# table -> {column: definition}
REQUIRED_COLUMNS: dict[str, dict[str, str]] = {
    "items": {
        "image_path": "TEXT",
        "default_filament_id": "INTEGER",
        "tag": "TEXT",
        "updated_at": "TEXT NOT NULL DEFAULT ''",
    },
    "inventory_adjustments": {
        "reason": "TEXT",
        "reference_type": "TEXT",
        "reference_id": "INTEGER",
    },
    "sales_sessions": {
        "location": "TEXT",
        "session_date": "TEXT",
        "ended_at": "TEXT",
        "weather": "TEXT",
    },
    "sales": {
        "note": "TEXT",
        "payment_method": "TEXT NOT NULL DEFAULT 'card'",
        "cash_received_cents": "INTEGER",
        "change_given_cents": "INTEGER",
        "sold_at": "TEXT NOT NULL DEFAULT ''",
    },
    "filament_spools": {
        "color": "TEXT",
        "brand": "TEXT",
        "owner": "TEXT",
        "dryness": "TEXT",
        "weight_grams": "INTEGER NOT NULL DEFAULT 0",
        "remaining_grams": "INTEGER NOT NULL DEFAULT 0",
        "cost_cents": "INTEGER",
        "purchase_date": "TEXT",
        "notes": "TEXT",
        "updated_at": "TEXT NOT NULL DEFAULT ''",
    },
    "filament_usage_logs": {
        "reason": "TEXT",
        "reference": "TEXT",
    },
}


def _table_columns(engine: Engine, table: str) -> list[dict[str, object]]:
    """Fetch SQLite's description of a table so we know what columns exist."""

    with engine.connect() as conn:
        return conn.execute(text(f"PRAGMA table_info({table})")).mappings().all()


def _column_names(engine: Engine, table: str) -> set[str]:
    return {record["name"] for record in _table_columns(engine, table)}


def _add_column_sqlite(engine: Engine, table: str, col_def: str) -> None:
    """ALTER TABLE ADD COLUMN helper."""
    with engine.begin() as conn:
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {col_def}"))


def _backfill_timestamps(engine: Engine) -> None:
    # Columns added with an empty default get a real value from a sibling column.
    with engine.begin() as conn:
        conn.execute(text("UPDATE items SET updated_at = created_at WHERE updated_at = ''"))
        conn.execute(text("UPDATE filament_spools SET updated_at = created_at WHERE updated_at = ''"))
        conn.execute(
            text(
                """
                UPDATE sales
                SET sold_at = COALESCE(
                    (SELECT started_at FROM sales_sessions WHERE sales_sessions.id = sales.session_id),
                    strftime('%Y-%m-%dT%H:%M:%SZ', 'now')
                )
                WHERE sold_at = ''
                """
            )
        )


def run_migrations(engine: Engine) -> list[str]:
    """Bring an existing SQLite schema up to date. Returns the columns added."""

    if engine.dialect.name != "sqlite":
        return []

    added: list[str] = []
    for table, needed in REQUIRED_COLUMNS.items():
        existing = _column_names(engine, table)
        if not existing:
            # Table absent -> create_all will build the fresh schema.
            continue
        for name, dtype in needed.items():
            if name not in existing:
                _add_column_sqlite(engine, table, f"{name} {dtype}")
                added.append(f"{table}.{name}")

    if added:
        _backfill_timestamps(engine)
        logger.info("database.migrated", extra={"extra_data": {"added_columns": added}})
    return added
