"""Hand the ledgers built at startup to route handlers.

The app factory constructs every ledger once, around a single ``Database``
handle, and parks them on ``app.state``. Handlers ask for them through these
dependencies instead of importing module globals.
"""

from __future__ import annotations

from fastapi import Request

from ..core.config import Settings
from ..services.filament_ledger import FilamentLedger
from ..services.sale_recorder import SaleRecorder
from ..services.session_lifecycle import SessionLifecycle
from ..services.stock_ledger import StockLedger


def get_settings_from_app(request: Request) -> Settings:
    return request.app.state.settings


def get_stock_ledger(request: Request) -> StockLedger:
    return request.app.state.stock_ledger


def get_filament_ledger(request: Request) -> FilamentLedger:
    return request.app.state.filament_ledger


def get_session_lifecycle(request: Request) -> SessionLifecycle:
    return request.app.state.session_lifecycle


def get_sale_recorder(request: Request) -> SaleRecorder:
    return request.app.state.sale_recorder
