"""Sellable catalog items and their append-only quantity ledger."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Text

from ..db.session import Base


class Item(Base):
    """A catalog entry with its quantity on hand.

    ``quantity`` is only ever changed through ``StockLedger.apply_delta`` so
    every change has a matching ``InventoryAdjustment`` row.
    """

    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_items_quantity_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    price_cents = Column(Integer, nullable=False, default=0)
    quantity = Column(Integer, nullable=False, default=0)
    image_path = Column(Text, nullable=True)
    default_filament_id = Column(
        Integer, ForeignKey("filament_spools.id", ondelete="SET NULL"), nullable=True
    )
    tag = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)


class InventoryAdjustment(Base):
    """Immutable record of one quantity change.

    Positive ``delta`` values are restocks, negatives are sales or shrinkage.
    Sale debits carry ``reference_type="sale"`` and the sale id.
    """

    __tablename__ = "inventory_adjustments"

    id = Column(Integer, primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("items.id", ondelete="RESTRICT"), nullable=False, index=True)
    delta = Column(Integer, nullable=False)
    reason = Column(Text, nullable=True)
    reference_type = Column(Text, nullable=True)
    reference_id = Column(Integer, nullable=True)
    created_at = Column(Text, nullable=False)


__all__ = ["Item", "InventoryAdjustment"]
