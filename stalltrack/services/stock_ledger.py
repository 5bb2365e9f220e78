"""Stock ledger: item records and their quantity on hand.

Every quantity change, whether a restock, a shrinkage write-off, an edit or
a sale, goes through ``apply_delta``. That single primitive enforces
``quantity >= 0`` and appends the ``InventoryAdjustment`` row, so the audit
trail always sums to the current quantity.
"""

from __future__ import annotations

import logging

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session

from ..core.clock import utcnow_iso
from ..core.errors import (
    InsufficientStockError,
    InvalidAmountError,
    InvalidQuantityError,
    LedgerError,
    NotFoundError,
)
from ..core.money import MAX_STORED_INTEGER, to_minor_units
from ..db.session import Database, lock_row
from ..models.filament import FilamentSpool
from ..models.inventory import InventoryAdjustment, Item
from ..schemas.inventory import AdjustmentOut, ItemOut, adjustment_to_out
from .queries import item_row, item_rows
from .validators import as_whole_number, clean_text

logger = logging.getLogger(__name__)

REASON_MANUAL = "manual"
REASON_INITIAL = "initial stock"
REASON_EDIT = "manual edit"


def _coerce_delta(delta: object) -> int:
    value = as_whole_number(
        delta,
        error=InvalidQuantityError,
        message="Delta must be a non-zero integer",
    )
    if value == 0:
        raise InvalidQuantityError("Delta must be a non-zero integer", details={"value": 0})
    return value


def _coerce_stock_level(quantity: object) -> int:
    value = as_whole_number(
        quantity,
        error=InvalidQuantityError,
        message="Quantity must be a non-negative integer",
    )
    if value < 0:
        raise InvalidQuantityError("Quantity must be a non-negative integer", details={"value": value})
    return value


def _coerce_price(price: object) -> int:
    cents = to_minor_units(price)
    if cents < 0:
        raise InvalidAmountError("Price cannot be negative", details={"price": price})
    return cents


def _ensure_spool(db: Session, spool_id: int | None) -> int | None:
    if spool_id is None:
        return None
    if db.get(FilamentSpool, spool_id) is None:
        raise NotFoundError("Filament spool not found", details={"spoolId": spool_id})
    return spool_id


class StockLedger:
    def __init__(self, database: Database) -> None:
        self.database = database

    # ---------- reads ----------

    def list_items(self) -> list[ItemOut]:
        with self.database.reader() as db:
            return item_rows(db)

    def get_item(self, item_id: int) -> ItemOut:
        with self.database.reader() as db:
            item = item_row(db, item_id)
        if item is None:
            raise NotFoundError("Item not found", details={"itemId": item_id})
        return item

    def low_stock(self, threshold: int = 5) -> list[ItemOut]:
        """Items at or below ``threshold`` units, emptiest first."""

        with self.database.reader() as db:
            return item_rows(
                db,
                Item.quantity <= threshold,
                order_by=(Item.quantity.asc(), func.lower(Item.name).asc(), Item.id.asc()),
            )

    def list_adjustments(self, item_id: int, limit: int = 100, offset: int = 0) -> list[AdjustmentOut]:
        with self.database.reader() as db:
            if db.get(Item, item_id) is None:
                raise NotFoundError("Item not found", details={"itemId": item_id})
            stmt = (
                select(InventoryAdjustment)
                .where(InventoryAdjustment.item_id == item_id)
                .order_by(desc(InventoryAdjustment.id))
                .limit(limit)
                .offset(offset)
            )
            return [adjustment_to_out(row) for row in db.execute(stmt).scalars().all()]

    # ---------- the ledger primitive ----------

    def apply_delta(
        self,
        db: Session,
        item: Item,
        delta: int,
        *,
        reason: str,
        reference_type: str | None = None,
        reference_id: int | None = None,
    ) -> InventoryAdjustment:
        """Change ``item.quantity`` by ``delta`` and append the audit row.

        Must be called inside an open unit of work with ``item`` loaded from
        that same session; the caller's commit makes both writes visible
        together.
        """

        new_quantity = item.quantity + delta
        if new_quantity < 0:
            raise InsufficientStockError(
                "Insufficient stock for adjustment",
                details={"itemId": item.id, "quantity": item.quantity, "delta": delta},
            )
        if new_quantity > MAX_STORED_INTEGER:
            raise InvalidQuantityError(
                "Quantity is too large to store",
                details={"itemId": item.id, "quantity": item.quantity, "delta": delta},
            )
        now = utcnow_iso()
        item.quantity = new_quantity
        item.updated_at = now
        adjustment = InventoryAdjustment(
            item_id=item.id,
            delta=delta,
            reason=reason,
            reference_type=reference_type,
            reference_id=reference_id,
            created_at=now,
        )
        db.add(adjustment)
        db.flush()
        return adjustment

    # ---------- writes ----------

    def adjust_quantity(self, item_id: int, delta: object, reason: str | None = REASON_MANUAL) -> ItemOut:
        """Apply a manual restock (positive) or write-off (negative)."""

        delta = _coerce_delta(delta)
        reason = clean_text(reason) or REASON_MANUAL
        try:
            with self.database.unit_of_work() as db:
                item = lock_row(db, Item, item_id)
                if item is None:
                    raise NotFoundError("Item not found", details={"itemId": item_id})
                adjustment = self.apply_delta(db, item, delta, reason=reason)
                result = item_row(db, item_id)
        except LedgerError as exc:
            logger.warning(
                "stock.adjust_rejected",
                extra={"extra_data": {"item_id": item_id, "delta": delta, "code": exc.code}},
            )
            raise
        logger.info(
            "stock.adjusted",
            extra={
                "extra_data": {
                    "item_id": item_id,
                    "delta": delta,
                    "reason": reason,
                    "quantity": result.quantity,
                    "adjustment_id": adjustment.id,
                }
            },
        )
        return result

    def create_item(self, payload: dict) -> ItemOut:
        name = clean_text(payload.get("name"))
        if not name:
            raise ValueError("name is required")
        price_cents = _coerce_price(payload.get("price"))
        quantity = payload.get("quantity")
        quantity = 0 if quantity is None else _coerce_stock_level(quantity)

        with self.database.unit_of_work() as db:
            now = utcnow_iso()
            item = Item(
                name=name,
                description=clean_text(payload.get("description")),
                price_cents=price_cents,
                quantity=0,
                image_path=clean_text(payload.get("image_path")),
                default_filament_id=_ensure_spool(db, payload.get("default_filament_id")),
                tag=clean_text(payload.get("tag")),
                created_at=now,
                updated_at=now,
            )
            db.add(item)
            db.flush()
            if quantity:
                self.apply_delta(db, item, quantity, reason=REASON_INITIAL)
            result = item_row(db, item.id)
        logger.info("item.created", extra={"extra_data": {"item_id": result.id, "quantity": quantity}})
        return result

    def update_item(self, item_id: int, payload: dict) -> ItemOut:
        """Edit item attributes.

        Keys absent from ``payload`` are left alone; present keys with
        ``None`` clear optional fields. A target ``quantity`` is turned into a
        delta and recorded as a "manual edit" adjustment.
        """

        with self.database.unit_of_work() as db:
            item = lock_row(db, Item, item_id)
            if item is None:
                raise NotFoundError("Item not found", details={"itemId": item_id})

            if "name" in payload and payload["name"] is not None:
                name = clean_text(payload["name"])
                if not name:
                    raise ValueError("name is required")
                item.name = name
            if payload.get("price") is not None:
                item.price_cents = _coerce_price(payload["price"])
            for field in ("description", "image_path", "tag"):
                if field in payload:
                    setattr(item, field, clean_text(payload[field]))
            if "default_filament_id" in payload:
                item.default_filament_id = _ensure_spool(db, payload["default_filament_id"])

            if payload.get("quantity") is not None:
                target = _coerce_stock_level(payload["quantity"])
                delta = target - item.quantity
                if delta:
                    self.apply_delta(db, item, delta, reason=REASON_EDIT)
            item.updated_at = utcnow_iso()
            db.flush()
            result = item_row(db, item_id)
        return result
