from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_stock_ledger
from ..schemas.inventory import AdjustmentOut, ItemCreate, ItemOut, ItemUpdate, StockAdjustRequest
from ..services.stock_ledger import StockLedger

router = APIRouter(prefix="/api/items", tags=["items"])


@router.get("", response_model=list[ItemOut])
def api_list(stock: StockLedger = Depends(get_stock_ledger)):
    return stock.list_items()


@router.get("/{item_id}", response_model=ItemOut)
def api_get(item_id: int, stock: StockLedger = Depends(get_stock_ledger)):
    return stock.get_item(item_id)


@router.post("", response_model=ItemOut, status_code=201)
def api_create(payload: ItemCreate, stock: StockLedger = Depends(get_stock_ledger)):
    try:
        return stock.create_item(payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.put("/{item_id}", response_model=ItemOut)
def api_update(item_id: int, payload: ItemUpdate, stock: StockLedger = Depends(get_stock_ledger)):
    try:
        return stock.update_item(item_id, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.post("/{item_id}/adjust", response_model=ItemOut)
def api_adjust(item_id: int, payload: StockAdjustRequest, stock: StockLedger = Depends(get_stock_ledger)):
    return stock.adjust_quantity(item_id, payload.delta, payload.reason)


@router.get("/{item_id}/adjustments", response_model=list[AdjustmentOut])
def api_adjustments(
    item_id: int,
    limit: int = 100,
    offset: int = 0,
    stock: StockLedger = Depends(get_stock_ledger),
):
    return stock.list_adjustments(item_id, limit=limit, offset=offset)
