"""
Timestamp resolution.

Packets carry their time in several fields and formats (ISO strings, epoch
milliseconds, Mongo {"$date": ...} wrappers). resolve_instant walks a
prioritized list of candidate fields and returns the first one that parses.
"""

import math
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional

import pandas as pd


def parse_instant(value: Any) -> Optional[datetime]:
    """
    Parse a single timestamp value into a timezone-aware UTC datetime.

    Naive values are taken as UTC. Numbers are epoch milliseconds.
    Returns None for anything that does not parse, including relative
    keywords such as "now".
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Mapping):
        if "$date" in value:
            return parse_instant(value["$date"])
        if "$numberLong" in value:
            return parse_instant(_to_int(value["$numberLong"]))
        return None

    if isinstance(value, datetime):
        return as_utc(value)

    try:
        if isinstance(value, (int, float)):
            if not math.isfinite(value):
                return None
            ts = pd.to_datetime(value, unit="ms", utc=True, errors="coerce")
        elif isinstance(value, str):
            text = value.strip()
            # pandas reads "now"/"today" as the wall clock; a real timestamp has digits
            if not any(ch.isdigit() for ch in text):
                return None
            ts = pd.to_datetime(text, utc=True, errors="coerce")
        else:
            return None
    except (ValueError, TypeError, OverflowError):
        return None

    if pd.isna(ts):
        return None
    return ts.to_pydatetime()


def resolve_instant(record: Any, fields: Iterable[str]) -> Optional[datetime]:
    """Return the first candidate field of record that parses to an instant."""
    if not isinstance(record, Mapping):
        return None
    for name in fields:
        instant = parse_instant(record.get(name))
        if instant is not None:
            return instant
    return None


def timestamp_text(value: Any) -> Optional[str]:
    """Textual form of a raw timestamp, used for day-prefix matching."""
    if isinstance(value, Mapping) and "$date" in value:
        value = value["$date"]
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, datetime):
        return value.isoformat()
    return None


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def as_utc(value: Optional[datetime] = None) -> datetime:
    """value as an aware UTC datetime; the current time when None."""
    if value is None:
        return datetime.now(timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
