"""Sale recorder: one sale, its stock debit and its audit row, all or nothing."""

from __future__ import annotations

import logging

from sqlalchemy import func, select

from ..core.clock import days_ago_iso, parse_timestamp, to_iso, utcnow_iso
from ..core.errors import (
    InsufficientCashError,
    InsufficientStockError,
    InvalidAmountError,
    InvalidQuantityError,
    LedgerError,
    MissingCashAmountError,
    NotFoundError,
    SessionClosedError,
)
from ..core.money import MAX_STORED_INTEGER, is_blank, to_minor_units
from ..db.session import Database, lock_row
from ..models.inventory import Item
from ..models.sales import PAYMENT_CARD, PAYMENT_CASH, SESSION_OPEN, Sale, SalesSession
from ..schemas.sales import DailySalesOut, SaleOut, daily_sales_to_out
from .queries import sale_rows
from .stock_ledger import StockLedger
from .validators import as_whole_number, clean_text

logger = logging.getLogger(__name__)

REASON_SALE = "sale"


def normalize_payment_method(method: object) -> str:
    """``cash`` when asked for cash, ``card`` for anything else (including nothing)."""

    if isinstance(method, str) and method.strip().lower() == PAYMENT_CASH:
        return PAYMENT_CASH
    return PAYMENT_CARD


class SaleRecorder:
    def __init__(self, database: Database, stock_ledger: StockLedger) -> None:
        self.database = database
        self.stock = stock_ledger

    def record_sale(
        self,
        session_id: int,
        item_id: int,
        quantity: object,
        unit_price: object = None,
        note: str | None = None,
        payment_method: str | None = None,
        cash_received: object = None,
        sold_at: object = None,
    ) -> SaleOut:
        """Record a sale against an open session.

        Every check runs before the first write. The sale row, the item's
        quantity decrement and the ``reason="sale"`` adjustment commit in a
        single unit of work; if any step fails none of them persist.
        """

        try:
            with self.database.unit_of_work() as db:
                session = lock_row(db, SalesSession, session_id)
                if session is None:
                    raise NotFoundError("Sales session not found", details={"sessionId": session_id})
                item = lock_row(db, Item, item_id)
                if item is None:
                    raise NotFoundError("Item not found", details={"itemId": item_id})
                if session.status != SESSION_OPEN:
                    raise SessionClosedError(
                        "Cannot log sales to a closed session",
                        details={"sessionId": session_id, "status": session.status},
                    )

                qty = as_whole_number(
                    quantity, error=InvalidQuantityError, message="Quantity must be a positive integer"
                )
                if qty <= 0:
                    raise InvalidQuantityError("Quantity must be a positive integer", details={"value": qty})
                if item.quantity < qty:
                    raise InsufficientStockError(
                        "Insufficient stock for this sale",
                        details={"itemId": item_id, "available": item.quantity, "requested": qty},
                    )

                if is_blank(unit_price):
                    unit_price_cents = item.price_cents
                else:
                    unit_price_cents = to_minor_units(unit_price)
                    if unit_price_cents < 0:
                        raise InvalidAmountError("Unit price cannot be negative", details={"unitPrice": unit_price})
                total_price_cents = unit_price_cents * qty
                if total_price_cents > MAX_STORED_INTEGER:
                    raise InvalidAmountError(
                        "Sale total is too large to store",
                        details={"unitPriceCents": unit_price_cents, "quantity": qty},
                    )

                method = normalize_payment_method(payment_method)
                cash_received_cents = None
                change_given_cents = None
                if method == PAYMENT_CASH:
                    if is_blank(cash_received):
                        raise MissingCashAmountError("Cash amount received is required for cash payments")
                    cash_received_cents = to_minor_units(cash_received)
                    if cash_received_cents < total_price_cents:
                        raise InsufficientCashError(
                            "Cash received is less than the sale total",
                            details={"cashReceivedCents": cash_received_cents, "totalPriceCents": total_price_cents},
                        )
                    change_given_cents = cash_received_cents - total_price_cents

                if sold_at is None or (isinstance(sold_at, str) and not sold_at.strip()):
                    sold_at_iso = utcnow_iso()
                else:
                    sold_at_iso = to_iso(parse_timestamp(sold_at))

                sale = Sale(
                    session_id=session_id,
                    item_id=item_id,
                    quantity=qty,
                    unit_price_cents=unit_price_cents,
                    total_price_cents=total_price_cents,
                    sold_at=sold_at_iso,
                    note=clean_text(note),
                    payment_method=method,
                    cash_received_cents=cash_received_cents,
                    change_given_cents=change_given_cents,
                )
                db.add(sale)
                db.flush()
                self.stock.apply_delta(
                    db,
                    item,
                    -qty,
                    reason=REASON_SALE,
                    reference_type=REASON_SALE,
                    reference_id=sale.id,
                )
                result = sale_rows(db, Sale.id == sale.id)[0]
        except LedgerError as exc:
            logger.warning(
                "sale.rejected",
                extra={
                    "extra_data": {
                        "session_id": session_id,
                        "item_id": item_id,
                        "quantity": quantity,
                        "code": exc.code,
                    }
                },
            )
            raise
        logger.info(
            "sale.recorded",
            extra={
                "extra_data": {
                    "sale_id": result.id,
                    "session_id": session_id,
                    "item_id": item_id,
                    "quantity": result.quantity,
                    "total_price": result.total_price,
                    "payment_method": result.payment_method,
                }
            },
        )
        return result

    # ---------- reads ----------

    def get_sale(self, sale_id: int) -> SaleOut:
        with self.database.reader() as db:
            rows = sale_rows(db, Sale.id == sale_id)
        if not rows:
            raise NotFoundError("Sale not found", details={"saleId": sale_id})
        return rows[0]

    def sales_for_session(self, session_id: int) -> list[SaleOut]:
        with self.database.reader() as db:
            if db.get(SalesSession, session_id) is None:
                raise NotFoundError("Sales session not found", details={"sessionId": session_id})
            return sale_rows(db, Sale.session_id == session_id)

    def recent_sales(self, days: int = 7, limit: int = 10) -> list[SaleOut]:
        with self.database.reader() as db:
            return sale_rows(db, Sale.sold_at >= days_ago_iso(days), limit=limit)

    def sales_by_day(self, days: int = 7) -> list[DailySalesOut]:
        """Revenue and units per UTC calendar day over the last ``days`` days, oldest first."""

        sale_date = func.substr(Sale.sold_at, 1, 10).label("sale_date")
        stmt = (
            select(
                sale_date,
                func.sum(Sale.total_price_cents).label("total_revenue_cents"),
                func.sum(Sale.quantity).label("total_items"),
            )
            .where(Sale.sold_at >= days_ago_iso(days))
            .group_by(sale_date)
            .order_by(sale_date.asc())
        )
        with self.database.reader() as db:
            rows = db.execute(stmt).all()
        return [
            daily_sales_to_out(date, total_revenue_cents=revenue, total_items=items)
            for date, revenue, items in rows
        ]
