"""Filament spools and their usage log."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Text

from ..db.session import Base


class FilamentSpool(Base):
    __tablename__ = "filament_spools"
    __table_args__ = (
        CheckConstraint("remaining_grams >= 0", name="ck_filament_spools_remaining_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    material = Column(Text, nullable=False, index=True)
    color = Column(Text, nullable=True)
    brand = Column(Text, nullable=True)
    owner = Column(Text, nullable=True)
    dryness = Column(Text, nullable=True)
    weight_grams = Column(Integer, nullable=False, default=0)
    remaining_grams = Column(Integer, nullable=False, default=0)
    cost_cents = Column(Integer, nullable=True)
    purchase_date = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)


class FilamentUsageLog(Base):
    """Grams taken off a spool. Append-only."""

    __tablename__ = "filament_usage_logs"
    __table_args__ = (
        CheckConstraint("used_grams > 0", name="ck_filament_usage_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    spool_id = Column(
        Integer, ForeignKey("filament_spools.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    used_grams = Column(Integer, nullable=False)
    reason = Column(Text, nullable=True)
    reference = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)


__all__ = ["FilamentSpool", "FilamentUsageLog"]
