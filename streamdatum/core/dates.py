# streamdatum/core/dates.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def epoch_millis_to_datetime(ms: int | float) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return EPOCH + timedelta(milliseconds=ms)


def datetime_to_epoch_millis(dt: datetime) -> int:
    """Convert a datetime to epoch milliseconds; naive values are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - EPOCH) // _ONE_MS


def _parse_utc(text: str) -> datetime | None:
    text = text.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def datum_date(d: Mapping[str, Any] | None) -> datetime | None:
    """
    Extract the date of a datum-style record.

    Rules, first match wins:
    - `date`: a datetime, returned as is
    - `localDate` (yyyy-MM-dd) with optional `localTime` (HH:mm), parsed as UTC
    - `created`: ISO-8601 text such as "2017-01-02 12:34:56.789Z"

    Returns None when no date can be extracted.
    """
    if not d:
        return None
    value = d.get("date")
    if isinstance(value, datetime):
        return value
    local_date = d.get("localDate")
    if local_date:
        local_time = d.get("localTime") or "00:00"
        return _parse_utc(f"{local_date}T{local_time}")
    created = d.get("created")
    if isinstance(created, str) and created:
        return _parse_utc(created)
    return None
