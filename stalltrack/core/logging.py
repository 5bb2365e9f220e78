"""JSON log lines for the stall tracker.

One object per line with the request id of the call in flight. Ledger
services pass their event fields as ``extra={"extra_data": {...}}``, and
those keys land at the top level, so ``sale_id`` or ``spool_id`` can be
filtered on directly.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Mapping

from ..middlewares import request_id_ctx_var

# uvicorn installs its own handlers unless told otherwise; route them through ours.
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line; ``extra_data`` keys are merged into the top level."""

    def __init__(self, app_name: str | None = None) -> None:
        super().__init__()
        self.app_name = app_name

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.app_name:
            payload["app"] = self.app_name
        request_id = request_id_ctx_var.get()
        if request_id:
            payload["request_id"] = request_id
        extra = getattr(record, "extra_data", None)
        if isinstance(extra, Mapping):
            payload.update(extra)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        # Ledger payloads can carry Decimals and raw request values.
        return json.dumps(payload, separators=(",", ":"), default=str)


def configure_logging(level: str | int = logging.INFO, app_name: str | None = None) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonLogFormatter(app_name))
    logging.root.handlers = [handler]
    logging.root.setLevel(level if isinstance(level, int) else level.upper())
    for name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers = []
        server_logger.propagate = True
    # Request lines are already logged by RequestIdMiddleware.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
