from __future__ import annotations

from fastapi import APIRouter, Depends

from ..core.config import Settings
from ..deps import get_sale_recorder, get_settings_from_app
from ..schemas.sales import DailySalesOut, SaleOut
from ..services.sale_recorder import SaleRecorder

router = APIRouter(prefix="/api/sales", tags=["sales"])


@router.get("/recent", response_model=list[SaleOut])
def api_recent(
    days: int | None = None,
    limit: int = 10,
    sales: SaleRecorder = Depends(get_sale_recorder),
    settings: Settings = Depends(get_settings_from_app),
):
    return sales.recent_sales(days=days or settings.RECENT_DAYS, limit=limit)


@router.get("/by-day", response_model=list[DailySalesOut])
def api_by_day(
    days: int | None = None,
    sales: SaleRecorder = Depends(get_sale_recorder),
    settings: Settings = Depends(get_settings_from_app),
):
    return sales.sales_by_day(days or settings.RECENT_DAYS)


@router.get("/{sale_id}", response_model=SaleOut)
def api_get(sale_id: int, sales: SaleRecorder = Depends(get_sale_recorder)):
    return sales.get_sale(sale_id)
