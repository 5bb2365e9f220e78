"""Item and inventory-adjustment payloads plus their row mappers."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from ..core.money import to_decimal
from ..models.filament import FilamentSpool
from ..models.inventory import InventoryAdjustment, Item
from .base import CamelModel, MoneyInput, NumericInput


class ItemCreate(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: Optional[MoneyInput] = None
    quantity: Optional[NumericInput] = None
    image_path: Optional[str] = None
    default_filament_id: Optional[int] = None
    tag: Optional[str] = None


class ItemUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[MoneyInput] = None
    # Applied through the stock ledger as a "manual edit" adjustment.
    quantity: Optional[NumericInput] = None
    image_path: Optional[str] = None
    default_filament_id: Optional[int] = None
    tag: Optional[str] = None


class StockAdjustRequest(CamelModel):
    delta: NumericInput
    reason: Optional[str] = None


class FilamentSummary(CamelModel):
    id: int
    material: Optional[str] = None
    color: Optional[str] = None
    brand: Optional[str] = None
    owner: Optional[str] = None
    dryness: Optional[str] = None


class ItemOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    quantity: int
    image_path: Optional[str] = None
    default_filament_id: Optional[int] = None
    default_filament: Optional[FilamentSummary] = None
    tag: Optional[str] = None
    created_at: str
    updated_at: str
    total_sold: int = 0
    total_revenue: float = 0.0


class AdjustmentOut(CamelModel):
    id: int
    item_id: int
    delta: int
    reason: Optional[str] = None
    reference_type: Optional[str] = None
    reference_id: Optional[int] = None
    created_at: str


def filament_summary(spool: FilamentSpool | None) -> FilamentSummary | None:
    if spool is None:
        return None
    return FilamentSummary(
        id=spool.id,
        material=spool.material,
        color=spool.color,
        brand=spool.brand,
        owner=spool.owner,
        dryness=spool.dryness,
    )


def item_to_out(
    item: Item,
    *,
    default_filament: FilamentSpool | None = None,
    total_sold: int | None = 0,
    total_revenue_cents: int | None = 0,
) -> ItemOut:
    """Map an ``items`` row (plus sales aggregates) to its API shape."""

    return ItemOut(
        id=item.id,
        name=item.name,
        description=item.description,
        price=to_decimal(item.price_cents),
        quantity=item.quantity,
        image_path=item.image_path,
        default_filament_id=item.default_filament_id,
        default_filament=filament_summary(default_filament),
        tag=item.tag,
        created_at=item.created_at,
        updated_at=item.updated_at,
        total_sold=int(total_sold or 0),
        total_revenue=to_decimal(total_revenue_cents or 0),
    )


def adjustment_to_out(adjustment: InventoryAdjustment) -> AdjustmentOut:
    return AdjustmentOut(
        id=adjustment.id,
        item_id=adjustment.item_id,
        delta=adjustment.delta,
        reason=adjustment.reason,
        reference_type=adjustment.reference_type,
        reference_id=adjustment.reference_id,
        created_at=adjustment.created_at,
    )
