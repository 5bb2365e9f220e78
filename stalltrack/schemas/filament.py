"""Filament spool and usage payloads plus their row mappers."""

from __future__ import annotations

from typing import Optional

from ..core.money import optional_to_decimal
from ..models.filament import FilamentSpool, FilamentUsageLog
from .base import CamelModel, MoneyInput, NumericInput


class SpoolCreate(CamelModel):
    material: Optional[str] = None
    color: Optional[str] = None
    brand: Optional[str] = None
    owner: Optional[str] = None
    dryness: Optional[str] = None
    weight_grams: Optional[NumericInput] = None
    remaining_grams: Optional[NumericInput] = None
    cost: Optional[MoneyInput] = None
    purchase_date: Optional[str] = None
    notes: Optional[str] = None


class SpoolUpdate(SpoolCreate):
    pass


class UsageCreate(CamelModel):
    used_grams: Optional[NumericInput] = None
    reason: Optional[str] = None
    reference: Optional[str] = None


class SpoolOut(CamelModel):
    id: int
    material: str
    color: Optional[str] = None
    brand: Optional[str] = None
    owner: Optional[str] = None
    dryness: Optional[str] = None
    weight_grams: int
    remaining_grams: int
    cost: Optional[float] = None
    purchase_date: Optional[str] = None
    notes: Optional[str] = None
    created_at: str
    updated_at: str
    usage_count: int = 0
    used_grams_total: int = 0


class UsageOut(CamelModel):
    id: int
    spool_id: int
    used_grams: int
    reason: Optional[str] = None
    reference: Optional[str] = None
    created_at: str


class UsageResult(CamelModel):
    usage: UsageOut
    spool: SpoolOut


def spool_to_out(
    spool: FilamentSpool,
    *,
    usage_count: int | None = 0,
    used_grams_total: int | None = 0,
) -> SpoolOut:
    return SpoolOut(
        id=spool.id,
        material=spool.material,
        color=spool.color,
        brand=spool.brand,
        owner=spool.owner,
        dryness=spool.dryness,
        weight_grams=spool.weight_grams,
        remaining_grams=spool.remaining_grams,
        cost=optional_to_decimal(spool.cost_cents),
        purchase_date=spool.purchase_date,
        notes=spool.notes,
        created_at=spool.created_at,
        updated_at=spool.updated_at,
        usage_count=int(usage_count or 0),
        used_grams_total=int(used_grams_total or 0),
    )


def usage_to_out(usage: FilamentUsageLog) -> UsageOut:
    return UsageOut(
        id=usage.id,
        spool_id=usage.spool_id,
        used_grams=usage.used_grams,
        reason=usage.reason,
        reference=usage.reference,
        created_at=usage.created_at,
    )
