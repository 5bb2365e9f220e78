from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_filament_ledger
from ..schemas.filament import SpoolCreate, SpoolOut, SpoolUpdate, UsageCreate, UsageOut, UsageResult
from ..services.filament_ledger import FilamentLedger

router = APIRouter(prefix="/api/filament", tags=["filament"])


@router.get("/spools", response_model=list[SpoolOut])
def api_list_spools(filament: FilamentLedger = Depends(get_filament_ledger)):
    return filament.list_spools()


@router.get("/spools/{spool_id}", response_model=SpoolOut)
def api_get_spool(spool_id: int, filament: FilamentLedger = Depends(get_filament_ledger)):
    return filament.get_spool(spool_id)


@router.post("/spools", response_model=SpoolOut, status_code=201)
def api_create_spool(payload: SpoolCreate, filament: FilamentLedger = Depends(get_filament_ledger)):
    try:
        return filament.create_spool(payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.put("/spools/{spool_id}", response_model=SpoolOut)
def api_update_spool(
    spool_id: int,
    payload: SpoolUpdate,
    filament: FilamentLedger = Depends(get_filament_ledger),
):
    try:
        return filament.update_spool(spool_id, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/spools/{spool_id}/usage", response_model=list[UsageOut])
def api_list_usage(spool_id: int, filament: FilamentLedger = Depends(get_filament_ledger)):
    return filament.list_usage(spool_id)


@router.post("/spools/{spool_id}/usage", response_model=UsageResult, status_code=201)
def api_log_usage(
    spool_id: int,
    payload: UsageCreate,
    filament: FilamentLedger = Depends(get_filament_ledger),
):
    usage, spool = filament.log_usage(spool_id, payload.used_grams, payload.reason, payload.reference)
    return UsageResult(usage=usage, spool=spool)
