"""Sales-session and sale payloads plus their row mappers."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from ..core.money import optional_to_decimal, to_decimal
from ..models.sales import PAYMENT_CARD, Sale, SalesSession
from .base import CamelModel, MoneyInput, NumericInput


class SessionCreate(CamelModel):
    title: str = Field(min_length=1)
    location: Optional[str] = None
    session_date: Optional[str] = None
    weather: Optional[str] = None


class WeatherUpdate(CamelModel):
    weather: Optional[str] = None


class SaleCreate(CamelModel):
    item_id: int
    quantity: Optional[NumericInput] = None
    unit_price: Optional[MoneyInput] = None
    note: Optional[str] = None
    payment_method: Optional[str] = None
    cash_received: Optional[MoneyInput] = None
    sold_at: Optional[str] = None


class SaleOut(CamelModel):
    id: int
    session_id: int
    item_id: int
    quantity: int
    unit_price: float
    total_price: float
    sold_at: str
    note: Optional[str] = None
    item_name: Optional[str] = None
    session_title: Optional[str] = None
    payment_method: str = PAYMENT_CARD
    cash_received: Optional[float] = None
    change_given: Optional[float] = None


class SessionOut(CamelModel):
    id: int
    title: str
    location: Optional[str] = None
    session_date: Optional[str] = None
    status: str
    started_at: str
    ended_at: Optional[str] = None
    weather: Optional[str] = None
    total_revenue: float = 0.0
    total_items_sold: int = 0
    sale_count: int = 0


class SessionDetail(SessionOut):
    sales: list[SaleOut] = Field(default_factory=list)


def sale_to_out(
    sale: Sale,
    *,
    item_name: str | None = None,
    session_title: str | None = None,
) -> SaleOut:
    return SaleOut(
        id=sale.id,
        session_id=sale.session_id,
        item_id=sale.item_id,
        quantity=sale.quantity,
        unit_price=to_decimal(sale.unit_price_cents),
        total_price=to_decimal(sale.total_price_cents),
        sold_at=sale.sold_at,
        note=sale.note,
        item_name=item_name,
        session_title=session_title,
        payment_method=sale.payment_method or PAYMENT_CARD,
        cash_received=optional_to_decimal(sale.cash_received_cents),
        change_given=optional_to_decimal(sale.change_given_cents),
    )


def session_to_out(
    session: SalesSession,
    *,
    total_revenue_cents: int | None = 0,
    total_items_sold: int | None = 0,
    sale_count: int | None = 0,
) -> SessionOut:
    return SessionOut(
        id=session.id,
        title=session.title,
        location=session.location,
        session_date=session.session_date,
        status=session.status,
        started_at=session.started_at,
        ended_at=session.ended_at,
        weather=session.weather,
        total_revenue=to_decimal(total_revenue_cents or 0),
        total_items_sold=int(total_items_sold or 0),
        sale_count=int(sale_count or 0),
    )


class DailySalesOut(CamelModel):
    date: str
    total_revenue: float = 0.0
    total_items: int = 0


def daily_sales_to_out(date: str, *, total_revenue_cents: int | None, total_items: int | None) -> DailySalesOut:
    return DailySalesOut(
        date=date,
        total_revenue=to_decimal(total_revenue_cents or 0),
        total_items=int(total_items or 0),
    )
