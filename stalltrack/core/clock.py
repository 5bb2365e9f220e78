"""Timestamp helpers.

Instants are stored as ISO-8601 UTC strings with a trailing ``Z`` and
second precision, so lexical order in SQL equals chronological order.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from .errors import InvalidTimestampError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    """Render an instant as ``YYYY-MM-DDTHH:MM:SSZ``. Naive values are taken as UTC."""

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).replace(tzinfo=None).isoformat(timespec="seconds") + "Z"


def utcnow_iso() -> str:
    return to_iso(utcnow())


def days_ago_iso(days: int) -> str:
    return to_iso(utcnow() - timedelta(days=days))


def parse_timestamp(value: object) -> datetime:
    """Parse an ISO-8601 string (``Z`` or offset, date-only allowed) into an aware instant.

    Raises ``InvalidTimestampError`` for anything unparseable.
    """

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidTimestampError("Invalid soldAt value provided", details={"value": value}) from None
    else:
        raise InvalidTimestampError("Invalid soldAt value provided", details={"value": repr(value)})
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def today(tz: str) -> date:
    """Current calendar date in ``tz`` (used for default session dates)."""

    return datetime.now(ZoneInfo(tz)).date()
