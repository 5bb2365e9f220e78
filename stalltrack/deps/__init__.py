"""FastAPI dependencies shared by the routers."""

from .ledgers import (
    get_filament_ledger,
    get_sale_recorder,
    get_session_lifecycle,
    get_settings_from_app,
    get_stock_ledger,
)

__all__ = [
    "get_filament_ledger",
    "get_sale_recorder",
    "get_session_lifecycle",
    "get_settings_from_app",
    "get_stock_ledger",
]
