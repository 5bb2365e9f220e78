"""Storage handle: engine, sessions and the all-or-nothing unit of work."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine, event, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# ``Base`` is the parent class for every SQLAlchemy model defined in stalltrack/models.
Base = declarative_base()

logger = logging.getLogger(__name__)


def _is_memory_url(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


class Database:
    """One explicitly constructed handle per process (or per test).

    ``open()`` builds the engine and brings the schema up to date, ``close()``
    releases it. Ledger components receive the handle in their constructor
    and open their own sessions from it.
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self.echo = echo
        self._engine: Engine | None = None
        self._sessionmaker: sessionmaker | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not open; call open() first")
        return self._engine

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def open(self) -> "Database":
        if self._engine is not None:
            return self
        kwargs: dict[str, object] = {"echo": self.echo}
        if self.is_sqlite:
            # Shared across FastAPI worker threads; other engines ignore this.
            kwargs["connect_args"] = {"check_same_thread": False}
            if _is_memory_url(self.url):
                # Every session must see the same in-memory database.
                kwargs["poolclass"] = StaticPool
        engine = create_engine(self.url, **kwargs)
        if self.is_sqlite:
            memory = _is_memory_url(self.url)
            if not memory and engine.url.database:
                Path(engine.url.database).parent.mkdir(parents=True, exist_ok=True)
            _install_sqlite_transaction_hooks(engine, wal=not memory)
        self._engine = engine
        self._sessionmaker = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)

        # Registering models before create_all so the metadata knows every table.
        from ..models import filament as _filament  # noqa: F401
        from ..models import inventory as _inventory  # noqa: F401
        from ..models import sales as _sales  # noqa: F401
        from .migrate import run_migrations

        Base.metadata.create_all(bind=engine)
        run_migrations(engine)
        logger.info("database.opened", extra={"extra_data": {"url": engine.url.render_as_string(hide_password=True)}})
        return self

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("database.closed")

    def session(self) -> Session:
        if self._sessionmaker is None:
            raise RuntimeError("Database is not open; call open() first")
        return self._sessionmaker()

    @contextmanager
    def unit_of_work(self) -> Iterator[Session]:
        """Yield a session whose writes commit together or not at all."""

        db = self.session()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    @contextmanager
    def reader(self) -> Iterator[Session]:
        db = self.session()
        try:
            yield db
        finally:
            db.close()


def _install_sqlite_transaction_hooks(engine: Engine, *, wal: bool) -> None:
    """Let SQLAlchemy, not pysqlite, decide when transactions begin.

    pysqlite defers BEGIN until the first write, which would leave the
    stock/grams check outside the transaction. Emitting ``BEGIN IMMEDIATE``
    takes the write lock up front, so two concurrent read-check-write
    sequences against the same row are serialized by SQLite itself.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # noqa: ANN001
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        if wal:
            cursor.execute("PRAGMA journal_mode = WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):  # noqa: ANN001
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def lock_row(db: Session, model, pk: int):
    """Load one row for update inside the current unit of work.

    SQLite ignores ``FOR UPDATE`` (the ``BEGIN IMMEDIATE`` already holds the
    write lock); other engines take a row lock.
    """

    stmt = select(model).where(model.id == pk).with_for_update()
    return db.execute(stmt).scalars().first()
