import math
from datetime import date, datetime, timezone
from typing import Any

from dateutil import parser as dateutil_parser

DEFAULT_TIME_PATHS = ["timestamp", "time", "created_at", "meta.time"]

_MISSING = object()

# fills fields a loose date string leaves out, instead of today's date
_PARSE_DEFAULT = datetime(1970, 1, 1)


def get_value_at_path(entry: Any, path: str):
    """
    "meta.time" -> entry["meta"]["time"]

    Returns _MISSING when a segment is absent or the current value is not an object.
    """
    current = entry
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _parse_string(s: str) -> datetime:
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        pass
    # RFC 2822 / HTTP dates, "2025/01/01", "January 1, 2025", ...
    return dateutil_parser.parse(s, default=_PARSE_DEFAULT)


def to_datetime(value: Any) -> datetime | None:
    """
    str  -> ISO-8601 (Z suffix ok), otherwise any format dateutil understands
    int/float -> epoch milliseconds
    Naive values are read as UTC. Anything unparseable or out of range returns None.
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            return _as_utc(_parse_string(s))
        except (ValueError, OverflowError):
            return None

    return None


def extract_time(entry: dict, time_paths: list[str]) -> datetime | None:
    """
    First path that resolves to a usable event time. The last representable
    day has no following day to bound its partition, so it counts as a miss.
    """
    for path in time_paths:
        value = get_value_at_path(entry, path)
        if value is _MISSING:
            continue
        dt = to_datetime(value)
        if dt is not None and dt.date() < date.max:
            return dt
    return None
