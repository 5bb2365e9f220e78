"""Sales sessions and the sales recorded within them."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Text

from ..db.session import Base

SESSION_OPEN = "open"
SESSION_CLOSED = "closed"

PAYMENT_CARD = "card"
PAYMENT_CASH = "cash"


class SalesSession(Base):
    """A bounded trading period. ``open`` -> ``closed``, never back."""

    __tablename__ = "sales_sessions"
    __table_args__ = (
        CheckConstraint("status IN ('open', 'closed')", name="ck_sales_sessions_status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(Text, nullable=False)
    location = Column(Text, nullable=True)
    session_date = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default=SESSION_OPEN)
    started_at = Column(Text, nullable=False)
    ended_at = Column(Text, nullable=True)
    weather = Column(Text, nullable=True)


class Sale(Base):
    """One immutable sale line. Prices are snapshotted in cents at sale time."""

    __tablename__ = "sales"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_sales_quantity_positive"),
        CheckConstraint("payment_method IN ('card', 'cash')", name="ck_sales_payment_method"),
    )

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(
        Integer, ForeignKey("sales_sessions.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    item_id = Column(Integer, ForeignKey("items.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price_cents = Column(Integer, nullable=False)
    total_price_cents = Column(Integer, nullable=False)
    sold_at = Column(Text, nullable=False, index=True)
    note = Column(Text, nullable=True)
    payment_method = Column(Text, nullable=False, default=PAYMENT_CARD)
    cash_received_cents = Column(Integer, nullable=True)
    change_given_cents = Column(Integer, nullable=True)


__all__ = [
    "SalesSession",
    "Sale",
    "SESSION_OPEN",
    "SESSION_CLOSED",
    "PAYMENT_CARD",
    "PAYMENT_CASH",
]
