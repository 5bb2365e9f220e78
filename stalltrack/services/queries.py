"""Read-side statements shared by the ledgers and the dashboard.

Each helper returns ready-to-serialize output models. Aggregates
(items sold, revenue, usage totals, session totals) are computed in SQL
from the append-only tables, never cached on the parent rows.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..models.filament import FilamentSpool, FilamentUsageLog
from ..models.inventory import Item
from ..models.sales import Sale, SalesSession
from ..schemas.filament import SpoolOut, spool_to_out
from ..schemas.inventory import ItemOut, item_to_out
from ..schemas.sales import SaleOut, SessionOut, sale_to_out, session_to_out


def _item_statement():
    total_sold = (
        select(func.coalesce(func.sum(Sale.quantity), 0))
        .where(Sale.item_id == Item.id)
        .correlate(Item)
        .scalar_subquery()
    )
    total_revenue = (
        select(func.coalesce(func.sum(Sale.total_price_cents), 0))
        .where(Sale.item_id == Item.id)
        .correlate(Item)
        .scalar_subquery()
    )
    return select(
        Item,
        FilamentSpool,
        total_sold.label("total_sold"),
        total_revenue.label("total_revenue_cents"),
    ).outerjoin(FilamentSpool, FilamentSpool.id == Item.default_filament_id)


def _item_out(row: Any) -> ItemOut:
    item, spool, total_sold, total_revenue_cents = row
    return item_to_out(
        item,
        default_filament=spool,
        total_sold=total_sold,
        total_revenue_cents=total_revenue_cents,
    )


def item_rows(db: Session, *criteria, order_by=None) -> list[ItemOut]:
    stmt = _item_statement()
    if criteria:
        stmt = stmt.where(*criteria)
    if order_by is None:
        order_by = (func.lower(Item.name).asc(), Item.id.asc())
    rows = db.execute(stmt.order_by(*order_by)).all()
    return [_item_out(row) for row in rows]


def item_row(db: Session, item_id: int) -> ItemOut | None:
    row = db.execute(_item_statement().where(Item.id == item_id)).first()
    return _item_out(row) if row else None


def _spool_statement():
    return (
        select(
            FilamentSpool,
            func.count(FilamentUsageLog.id).label("usage_count"),
            func.coalesce(func.sum(FilamentUsageLog.used_grams), 0).label("used_grams_total"),
        )
        .outerjoin(FilamentUsageLog, FilamentUsageLog.spool_id == FilamentSpool.id)
        .group_by(FilamentSpool.id)
    )


def spool_rows(db: Session) -> list[SpoolOut]:
    stmt = _spool_statement().order_by(FilamentSpool.created_at.desc(), FilamentSpool.id.desc())
    return [
        spool_to_out(spool, usage_count=count, used_grams_total=total)
        for spool, count, total in db.execute(stmt).all()
    ]


def spool_row(db: Session, spool_id: int) -> SpoolOut | None:
    row = db.execute(_spool_statement().where(FilamentSpool.id == spool_id)).first()
    if not row:
        return None
    spool, count, total = row
    return spool_to_out(spool, usage_count=count, used_grams_total=total)


def sale_rows(db: Session, *criteria, limit: int | None = None) -> list[SaleOut]:
    stmt = (
        select(Sale, Item.name, SalesSession.title)
        .outerjoin(Item, Item.id == Sale.item_id)
        .outerjoin(SalesSession, SalesSession.id == Sale.session_id)
        .order_by(Sale.sold_at.desc(), Sale.id.desc())
    )
    if criteria:
        stmt = stmt.where(*criteria)
    if limit is not None:
        stmt = stmt.limit(limit)
    return [
        sale_to_out(sale, item_name=item_name, session_title=session_title)
        for sale, item_name, session_title in db.execute(stmt).all()
    ]


def _session_statement():
    return (
        select(
            SalesSession,
            func.coalesce(func.sum(Sale.total_price_cents), 0).label("total_revenue_cents"),
            func.coalesce(func.sum(Sale.quantity), 0).label("total_items"),
            func.count(Sale.id).label("sale_count"),
        )
        .outerjoin(Sale, Sale.session_id == SalesSession.id)
        .group_by(SalesSession.id)
    )


def _session_out(row: Any) -> SessionOut:
    session, revenue, items, count = row
    return session_to_out(
        session,
        total_revenue_cents=revenue,
        total_items_sold=items,
        sale_count=count,
    )


def session_rows(db: Session, *criteria) -> list[SessionOut]:
    stmt = _session_statement().order_by(SalesSession.started_at.desc(), SalesSession.id.desc())
    if criteria:
        stmt = stmt.where(*criteria)
    return [_session_out(row) for row in db.execute(stmt).all()]


def session_row(db: Session, session_id: int) -> SessionOut | None:
    row = db.execute(_session_statement().where(SalesSession.id == session_id)).first()
    return _session_out(row) if row else None
