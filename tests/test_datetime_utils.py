import time
from datetime import datetime, timezone

from src.utils.datetime_utils import (
    ensure_utc,
    format_http_date,
    parse_iso,
    parse_to_utc_with_tzinfo,
    to_display_tz,
    to_iso_z,
)


def test_parse_various_tz_strings():
    # GMT string
    dt, off = parse_to_utc_with_tzinfo("Tue, 15 Jan 2019 12:45:26 GMT")
    assert dt == datetime(2019, 1, 15, 12, 45, 26, tzinfo=timezone.utc)
    assert off == 0

    # Paris summer time
    dt2, off2 = parse_to_utc_with_tzinfo("2024-05-06T12:00:00+02:00")
    assert off2 == 120
    assert dt2 == datetime(2024, 5, 6, 10, 0, tzinfo=timezone.utc)

    # Naive -> treated as UTC
    dt3, off3 = parse_to_utc_with_tzinfo("2024-01-01 00:00:00")
    assert off3 == 0
    assert dt3.tzinfo == timezone.utc


def test_parse_feedparser_struct_time():
    parsed = time.strptime("2024-05-06 08:00:00", "%Y-%m-%d %H:%M:%S")
    dt, off = parse_to_utc_with_tzinfo(parsed)
    assert dt == datetime(2024, 5, 6, 8, 0, tzinfo=timezone.utc)
    assert off == 0


def test_iso_z_round_trip():
    value = datetime(2024, 5, 6, 8, 0, 0, 123456, tzinfo=timezone.utc)
    rendered = to_iso_z(value)
    assert rendered == "2024-05-06T08:00:00.123Z"
    assert parse_iso(rendered) == datetime(2024, 5, 6, 8, 0, 0, 123000, tzinfo=timezone.utc)


def test_display_paris():
    base = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
    local = to_display_tz(base, "Europe/Paris")
    assert local.hour == 13
    assert to_display_tz(base, "Nowhere/Atlantis") == base


def test_format_http_date():
    naive = datetime(2024, 5, 6, 8, 0)
    assert format_http_date(naive) == "Mon, 06 May 2024 08:00:00 GMT"


def test_ensure_utc():
    paris = datetime.fromisoformat("2024-05-06T12:00:00+02:00")
    assert ensure_utc(paris) == datetime(2024, 5, 6, 10, 0, tzinfo=timezone.utc)
    assert ensure_utc(paris).tzinfo == timezone.utc
    assert ensure_utc(datetime(2024, 5, 6, 10, 0)).tzinfo == timezone.utc
