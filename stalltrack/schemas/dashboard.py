"""Dashboard payload: today's session, the weekly trend, recent sales, low stock."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from .base import CamelModel
from .inventory import ItemOut
from .sales import DailySalesOut, SaleOut, SessionDetail


class TodaySummary(CamelModel):
    session_id: int
    title: str
    status: str
    weather: Optional[str] = None
    total_revenue: float = 0.0
    total_items_sold: int = 0
    sale_count: int = 0
    latest_sales: list[SaleOut] = Field(default_factory=list)


class DashboardOut(CamelModel):
    today_summary: Optional[TodaySummary] = None
    recent_trend: list[DailySalesOut] = Field(default_factory=list)
    recent_sales: list[SaleOut] = Field(default_factory=list)
    low_stock_items: list[ItemOut] = Field(default_factory=list)


def today_summary_from(session: SessionDetail, *, latest: int = 5) -> TodaySummary:
    return TodaySummary(
        session_id=session.id,
        title=session.title,
        status=session.status,
        weather=session.weather,
        total_revenue=session.total_revenue,
        total_items_sold=session.total_items_sold,
        sale_count=session.sale_count,
        latest_sales=session.sales[:latest],
    )
