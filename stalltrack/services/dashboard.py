"""Dashboard read model."""

from __future__ import annotations

from ..core.clock import today
from ..schemas.dashboard import DashboardOut, today_summary_from
from ..schemas.sales import SessionOut
from .sale_recorder import SaleRecorder
from .session_lifecycle import SessionLifecycle
from .stock_ledger import StockLedger


def pick_todays_session(sessions: list[SessionOut], today_iso: str) -> SessionOut | None:
    """Prefer an open session dated today, then one started today, then the newest."""

    if not sessions:
        return None
    for session in sessions:
        if session.session_date and session.session_date.startswith(today_iso):
            return session
    for session in sessions:
        if session.started_at and session.started_at.startswith(today_iso):
            return session
    return sessions[0]


def dashboard_summary(
    sessions: SessionLifecycle,
    sales: SaleRecorder,
    stock: StockLedger,
    *,
    tz: str = "UTC",
    recent_days: int = 7,
    low_stock_threshold: int = 5,
) -> DashboardOut:
    todays = pick_todays_session(sessions.active_sessions(), today(tz).isoformat())
    today_summary = today_summary_from(sessions.get_session(todays.id)) if todays else None
    return DashboardOut(
        today_summary=today_summary,
        recent_trend=sales.sales_by_day(recent_days),
        recent_sales=sales.recent_sales(days=recent_days, limit=5),
        low_stock_items=stock.low_stock(low_stock_threshold),
    )
