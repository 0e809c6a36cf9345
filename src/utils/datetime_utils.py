from __future__ import annotations

import calendar
import time as _time
from datetime import datetime, timedelta, timezone
from typing import Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as date_parser


def _tz_offset_minutes(dt: datetime) -> int:
    if dt.tzinfo is None:
        return 0
    offset = dt.utcoffset() or timedelta(0)
    return int(offset.total_seconds() // 60)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Aware UTC copy of ``value``; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_to_utc_with_tzinfo(
    value: Union[str, _time.struct_time, datetime, None],
) -> Tuple[datetime, int]:
    """
    Parse the date forms found in feeds into a UTC datetime.

    ``struct_time`` values are the ``*_parsed`` fields of feedparser, which
    are already expressed in UTC. Naive datetimes and strings without an
    offset are taken as UTC.

    Returns: (dt_utc, original_tz_offset_minutes)
    """
    if value is None:
        return utc_now(), 0

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, _time.struct_time):
        dt = datetime.fromtimestamp(calendar.timegm(value), tz=timezone.utc)
    else:
        dt = date_parser.parse(str(value))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc), _tz_offset_minutes(dt)


def to_iso_z(dt: datetime) -> str:
    """Millisecond ISO-8601 in UTC with a ``Z`` suffix (``2024-05-01T08:30:00.000Z``)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_iso(value: str | datetime) -> datetime:
    """Parse a stored timestamp back into an aware UTC datetime."""
    dt, _ = parse_to_utc_with_tzinfo(value)
    return dt


def to_display_tz(dt_utc: datetime, tz: str = "Europe/Paris") -> datetime:
    """Convert a UTC datetime to the given display timezone (zoneinfo key)."""
    if dt_utc.tzinfo is None:
        dt_utc = dt_utc.replace(tzinfo=timezone.utc)
    try:
        return dt_utc.astimezone(ZoneInfo(tz))
    except ZoneInfoNotFoundError:
        return dt_utc


def format_http_date(dt: datetime) -> str:
    """RFC 1123 date in GMT, as used by RSS ``pubDate``."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S GMT")
