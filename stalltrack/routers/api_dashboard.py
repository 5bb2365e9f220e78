from __future__ import annotations

from fastapi import APIRouter, Depends

from ..core.config import Settings
from ..deps import get_sale_recorder, get_session_lifecycle, get_settings_from_app, get_stock_ledger
from ..schemas.dashboard import DashboardOut
from ..services.dashboard import dashboard_summary
from ..services.sale_recorder import SaleRecorder
from ..services.session_lifecycle import SessionLifecycle
from ..services.stock_ledger import StockLedger

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardOut)
def api_dashboard(
    sessions: SessionLifecycle = Depends(get_session_lifecycle),
    sales: SaleRecorder = Depends(get_sale_recorder),
    stock: StockLedger = Depends(get_stock_ledger),
    settings: Settings = Depends(get_settings_from_app),
):
    return dashboard_summary(
        sessions,
        sales,
        stock,
        tz=settings.TZ,
        recent_days=settings.RECENT_DAYS,
        low_stock_threshold=settings.LOW_STOCK_THRESHOLD,
    )
