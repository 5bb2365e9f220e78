"""Filament ledger: spools and the grams taken off them."""

from __future__ import annotations

import logging

from sqlalchemy import desc, select

from ..core.clock import utcnow_iso
from ..core.errors import InsufficientFilamentError, InvalidAmountError, LedgerError, NotFoundError
from ..core.money import is_blank, to_minor_units
from ..db.session import Database, lock_row
from ..models.filament import FilamentSpool, FilamentUsageLog
from ..schemas.filament import SpoolOut, UsageOut, usage_to_out
from .queries import spool_row, spool_rows
from .validators import as_whole_number, clean_text

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("color", "brand", "owner", "dryness", "purchase_date", "notes")


def _grams(value: object, label: str) -> int:
    grams = as_whole_number(
        value,
        error=InvalidAmountError,
        message=f"{label} must be a non-negative whole number of grams",
    )
    if grams < 0:
        raise InvalidAmountError(
            f"{label} must be a non-negative whole number of grams", details={"value": grams}
        )
    return grams


def _used_grams(value: object) -> int:
    grams = as_whole_number(value, error=InvalidAmountError, message="Used grams must be a positive number")
    if grams <= 0:
        raise InvalidAmountError("Used grams must be a positive number", details={"value": grams})
    return grams


def _cost(value: object) -> int | None:
    if is_blank(value):
        return None
    cents = to_minor_units(value)
    if cents < 0:
        raise InvalidAmountError("Cost cannot be negative", details={"cost": value})
    return cents


class FilamentLedger:
    def __init__(self, database: Database) -> None:
        self.database = database

    def list_spools(self) -> list[SpoolOut]:
        with self.database.reader() as db:
            return spool_rows(db)

    def get_spool(self, spool_id: int) -> SpoolOut:
        with self.database.reader() as db:
            spool = spool_row(db, spool_id)
        if spool is None:
            raise NotFoundError("Spool not found", details={"spoolId": spool_id})
        return spool

    def list_usage(self, spool_id: int) -> list[UsageOut]:
        """Usage history for one spool, newest first."""

        with self.database.reader() as db:
            if db.get(FilamentSpool, spool_id) is None:
                raise NotFoundError("Spool not found", details={"spoolId": spool_id})
            stmt = (
                select(FilamentUsageLog)
                .where(FilamentUsageLog.spool_id == spool_id)
                .order_by(desc(FilamentUsageLog.created_at), desc(FilamentUsageLog.id))
            )
            return [usage_to_out(row) for row in db.execute(stmt).scalars().all()]

    def create_spool(self, payload: dict) -> SpoolOut:
        material = clean_text(payload.get("material"))
        if not material:
            raise ValueError("Material is required")
        weight = payload.get("weight_grams")
        weight = 0 if weight is None else _grams(weight, "Weight")
        remaining = payload.get("remaining_grams")
        # A fresh spool is full unless told otherwise.
        remaining = weight if remaining is None else _grams(remaining, "Remaining")

        with self.database.unit_of_work() as db:
            now = utcnow_iso()
            spool = FilamentSpool(
                material=material,
                weight_grams=weight,
                remaining_grams=remaining,
                cost_cents=_cost(payload.get("cost")),
                created_at=now,
                updated_at=now,
                **{field: clean_text(payload.get(field)) for field in _TEXT_FIELDS},
            )
            db.add(spool)
            db.flush()
            result = spool_row(db, spool.id)
        logger.info(
            "filament.spool_created",
            extra={"extra_data": {"spool_id": result.id, "material": material, "remaining_grams": remaining}},
        )
        return result

    def update_spool(self, spool_id: int, payload: dict) -> SpoolOut:
        """Edit spool attributes.

        Gram counts only have to be non-negative whole numbers; ``remaining``
        may exceed ``weight`` (re-weighed or re-spooled filament).
        """

        with self.database.unit_of_work() as db:
            spool = lock_row(db, FilamentSpool, spool_id)
            if spool is None:
                raise NotFoundError("Spool not found", details={"spoolId": spool_id})

            if payload.get("material") is not None:
                material = clean_text(payload["material"])
                if not material:
                    raise ValueError("Material is required")
                spool.material = material
            if payload.get("weight_grams") is not None:
                spool.weight_grams = _grams(payload["weight_grams"], "Weight")
            if payload.get("remaining_grams") is not None:
                spool.remaining_grams = _grams(payload["remaining_grams"], "Remaining")
            if "cost" in payload:
                spool.cost_cents = _cost(payload["cost"])
            for field in _TEXT_FIELDS:
                if field in payload:
                    setattr(spool, field, clean_text(payload[field]))
            spool.updated_at = utcnow_iso()
            db.flush()
            result = spool_row(db, spool_id)
        return result

    def log_usage(
        self,
        spool_id: int,
        used_grams: object,
        reason: str | None = None,
        reference: str | None = None,
    ) -> tuple[UsageOut, SpoolOut]:
        """Take ``used_grams`` off a spool and append the usage row, atomically."""

        try:
            grams = _used_grams(used_grams)
            with self.database.unit_of_work() as db:
                spool = lock_row(db, FilamentSpool, spool_id)
                if spool is None:
                    raise NotFoundError("Spool not found", details={"spoolId": spool_id})
                if grams > spool.remaining_grams:
                    raise InsufficientFilamentError(
                        "Not enough filament remaining on this spool",
                        details={"spoolId": spool_id, "remainingGrams": spool.remaining_grams, "usedGrams": grams},
                    )
                now = utcnow_iso()
                usage = FilamentUsageLog(
                    spool_id=spool_id,
                    used_grams=grams,
                    reason=clean_text(reason),
                    reference=clean_text(reference),
                    created_at=now,
                )
                db.add(usage)
                spool.remaining_grams -= grams
                spool.updated_at = now
                db.flush()
                usage_out = usage_to_out(usage)
                spool_out = spool_row(db, spool_id)
        except LedgerError as exc:
            logger.warning(
                "filament.usage_rejected",
                extra={"extra_data": {"spool_id": spool_id, "used_grams": used_grams, "code": exc.code}},
            )
            raise
        logger.info(
            "filament.used",
            extra={
                "extra_data": {
                    "spool_id": spool_id,
                    "used_grams": grams,
                    "remaining_grams": spool_out.remaining_grams,
                    "usage_id": usage_out.id,
                }
            },
        )
        return usage_out, spool_out
