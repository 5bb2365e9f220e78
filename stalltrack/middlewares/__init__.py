from __future__ import annotations

from .request_id import RequestIdMiddleware, completion_level, request_id_ctx_var

__all__ = [
    "completion_level",
    "RequestIdMiddleware",
    "request_id_ctx_var",
]
