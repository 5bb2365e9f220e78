"""Sales sessions: open on creation, closed once, never reopened."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..core.clock import today, utcnow_iso
from ..core.errors import NotFoundError
from ..db.session import Database, lock_row
from ..models.sales import SESSION_CLOSED, SESSION_OPEN, Sale, SalesSession
from ..schemas.sales import SessionDetail, SessionOut
from .queries import sale_rows, session_row, session_rows
from .validators import clean_text

logger = logging.getLogger(__name__)


class SessionLifecycle:
    def __init__(self, database: Database, tz: str = "UTC") -> None:
        self.database = database
        self.tz = tz

    def list_sessions(self) -> list[SessionOut]:
        with self.database.reader() as db:
            return session_rows(db)

    def active_sessions(self) -> list[SessionOut]:
        with self.database.reader() as db:
            return session_rows(db, SalesSession.status == SESSION_OPEN)

    def get_session(self, session_id: int) -> SessionDetail:
        """One session with its totals and its sales, newest first."""

        with self.database.reader() as db:
            return self._detail(db, session_id)

    def _detail(self, db: Session, session_id: int) -> SessionDetail:
        summary = session_row(db, session_id)
        if summary is None:
            raise NotFoundError("Session not found", details={"sessionId": session_id})
        sales = sale_rows(db, Sale.session_id == session_id)
        return SessionDetail(**summary.model_dump(), sales=sales)

    def create_session(
        self,
        title: str,
        location: str | None = None,
        session_date: str | None = None,
        weather: str | None = None,
    ) -> SessionDetail:
        title = clean_text(title)
        if not title:
            raise ValueError("Session title is required")
        with self.database.unit_of_work() as db:
            session = SalesSession(
                title=title,
                location=clean_text(location),
                session_date=clean_text(session_date) or today(self.tz).isoformat(),
                status=SESSION_OPEN,
                started_at=utcnow_iso(),
                weather=clean_text(weather),
            )
            db.add(session)
            db.flush()
            result = self._detail(db, session.id)
        logger.info(
            "session.opened",
            extra={"extra_data": {"session_id": result.id, "title": title, "session_date": result.session_date}},
        )
        return result

    def close_session(self, session_id: int) -> SessionDetail:
        """Close an open session. Closing a closed session returns it unchanged."""

        with self.database.unit_of_work() as db:
            session = lock_row(db, SalesSession, session_id)
            if session is None:
                raise NotFoundError("Session not found", details={"sessionId": session_id})
            changed = session.status != SESSION_CLOSED
            if changed:
                session.status = SESSION_CLOSED
                session.ended_at = utcnow_iso()
                db.flush()
            result = self._detail(db, session_id)
        if changed:
            logger.info(
                "session.closed",
                extra={
                    "extra_data": {
                        "session_id": session_id,
                        "ended_at": result.ended_at,
                        "sale_count": result.sale_count,
                        "total_revenue": result.total_revenue,
                    }
                },
            )
        return result

    def update_weather(self, session_id: int, weather: str | None) -> SessionDetail:
        with self.database.unit_of_work() as db:
            session = lock_row(db, SalesSession, session_id)
            if session is None:
                raise NotFoundError("Session not found", details={"sessionId": session_id})
            session.weather = clean_text(weather)
            db.flush()
            return self._detail(db, session_id)
