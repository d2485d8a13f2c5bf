"""
=============================================================================
HTTP DATE CODEC
=============================================================================

Parses and formats the timestamps carried in HTTP headers.

=============================================================================
THREE FORMATS FOR ONE THING
=============================================================================

HTTP has accumulated several ways of writing a date. RFC 7231 says a
server must ACCEPT all three of these, but only ever SEND the first:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HTTP-DATE LAYOUTS                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   RFC 1123 (preferred)                                              │
    │      Sun, 06 Nov 1994 08:49:37 GMT                                  │
    │                                                                      │
    │   RFC 850 (obsolete, two-digit year!)                               │
    │      Sunday, 06-Nov-94 08:49:37 GMT                                 │
    │                                                                      │
    │   ANSI C asctime() (obsolete, no zone, single-digit day padded)    │
    │      Sun Nov  6 08:49:37 1994                                       │
    │      Sun Nov 6 08:49:37 1994                                        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

We also accept the "Sun Nov 6 08:49:37 GMT 1994" layout some clients
produce by stringifying a date object with its zone.

=============================================================================
LENIENT PARSING
=============================================================================

Parsing is structural, not calendrical. As long as every field is in
the right place, out-of-range values roll over into the next unit:

    Sun, 31 Feb 1994 10:00:00 GMT   →   1994-03-03 10:00:00 UTC
    Sun, 06 Nov 1994 24:00:00 GMT   →   1994-11-07 00:00:00 UTC

Layouts are tried in order and the first one that matches wins.
parse_http_date() returns None only when NONE of them match, which the
request parser turns into 400 Bad Request. A missing header is a
different thing entirely (no conditional check, no error).

=============================================================================
"""

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Optional, Union


# Weekday names (0=Monday in Python's datetime)
_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
_DAY_NAMES = {name.lower() for name in _DAYS} | {
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
}

# Month names (1-indexed, so we subtract 1)
_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
_MONTH_NUMBERS = {name.lower(): number for number, name in enumerate(_MONTHS, 1)}
_MONTH_NUMBERS.update({
    name: number for number, name in enumerate(
        ["january", "february", "march", "april", "may", "june", "july",
         "august", "september", "october", "november", "december"], 1)
})

# Zone abbreviations in hours east of UTC
_ZONE_OFFSETS = {
    "GMT": 0, "UTC": 0, "UT": 0, "Z": 0,
    "EST": -5, "EDT": -4,
    "CST": -6, "CDT": -5,
    "MST": -7, "MDT": -6,
    "PST": -8, "PDT": -7,
}
_NUMERIC_ZONE = re.compile(r"^(?:GMT|UTC)?([+-])(\d{1,2}):?(\d{2})$")


# =============================================================================
# LAYOUT TABLE
# =============================================================================
#
# Ordered (name, pattern) pairs. Each pattern captures the same named
# groups so a single builder can turn any match into an instant.
#
_WDAY = r"(?P<wday>[A-Za-z]+)"
_MON = r"(?P<month>[A-Za-z]+)"
_DAY = r"(?P<day>\d{1,2})"
_TIME = r"(?P<hour>\d{1,2}):(?P<minute>\d{1,2}):(?P<second>\d{1,2})"
_ZONE = r"(?P<zone>\S+)"

DATE_LAYOUTS = [
    ("rfc1123", re.compile(
        rf"^{_WDAY},\s*{_DAY}\s+{_MON}\s+(?P<year>\d{{4}})\s+{_TIME}\s+{_ZONE}$")),
    ("rfc850", re.compile(
        rf"^{_WDAY},\s*{_DAY}-{_MON}-(?P<year>\d{{4}}|\d{{2}})\s+{_TIME}\s+{_ZONE}$")),
    ("asctime", re.compile(
        rf"^{_WDAY}\s+{_MON}\s+{_DAY}\s+{_TIME}\s+(?P<year>\d{{4}})$")),
    ("date-string", re.compile(
        rf"^{_WDAY}\s+{_MON}\s+{_DAY}\s+{_TIME}\s+{_ZONE}\s+(?P<year>\d{{4}})$")),
]


def parse_http_date(text: str) -> Optional[datetime]:
    """
    Parse an HTTP date header value.

    Args:
        text: Header value, e.g. "Sun, 06 Nov 1994 08:49:37 GMT".

    Returns:
        Timezone-aware UTC datetime, or None if no layout matches.
    """
    text = text.strip()
    for _name, pattern in DATE_LAYOUTS:
        match = pattern.match(text)
        if match is None:
            continue
        instant = _build_instant(match)
        if instant is not None:
            return instant
    return None


def format_http_date(value: Union[datetime, float, None] = None) -> str:
    """
    Format an instant as an RFC 1123 HTTP-date.

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Sun, 06 Nov 1994 08:49:37 GMT

    Args:
        value: Aware or naive (assumed UTC) datetime, epoch seconds,
               or None for "now".

    Returns:
        Formatted date string.
    """
    dt = _as_utc(value)
    return (
        f"{_DAYS[dt.weekday()]}, "
        f"{dt.day:02d} {_MONTHS[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def to_epoch_seconds(value: Union[datetime, float]) -> int:
    """Whole seconds since the epoch, truncated toward the past."""
    if isinstance(value, datetime):
        return math.floor(_as_utc(value).timestamp())
    return math.floor(value)


def _as_utc(value: Union[datetime, float, None]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return datetime.fromtimestamp(value, tz=timezone.utc)


def _build_instant(match: "re.Match[str]") -> Optional[datetime]:
    """
    Turn a layout match into a UTC instant, or None if a name is bad.

    Day, hour, minute and second are added as offsets from the first of
    the month, which is what makes the parse lenient.
    """
    fields = match.groupdict()

    if fields["wday"].lower() not in _DAY_NAMES:
        return None

    month = _MONTH_NUMBERS.get(fields["month"].lower())
    if month is None:
        return None

    offset = timedelta(0)
    if fields.get("zone") is not None:
        offset = _parse_zone(fields["zone"])
        if offset is None:
            return None

    year = int(fields["year"])
    if len(fields["year"]) == 2:
        year = _expand_two_digit_year(year)

    try:
        base = datetime(year, month, 1, tzinfo=timezone.utc)
        instant = base + timedelta(
            days=int(fields["day"]) - 1,
            hours=int(fields["hour"]),
            minutes=int(fields["minute"]),
            seconds=int(fields["second"]),
        )
        return instant - offset
    except (ValueError, OverflowError):
        # year 0000 or a rollover past datetime.max
        return None


def _parse_zone(token: str) -> Optional[timedelta]:
    name = token.upper()
    if name in _ZONE_OFFSETS:
        return timedelta(hours=_ZONE_OFFSETS[name])

    match = _NUMERIC_ZONE.match(name)
    if match is None:
        return None
    sign = -1 if match.group(1) == "-" else 1
    return sign * timedelta(hours=int(match.group(2)), minutes=int(match.group(3)))


def _expand_two_digit_year(year: int, today: Optional[datetime] = None) -> int:
    """
    Place a two-digit year within 80 years before and 20 years after now.

        "94" in 2026  →  1994
        "40" in 2026  →  2040
        "50" in 2026  →  1950
    """
    current = (today or datetime.now(timezone.utc)).year
    full = current - current % 100 + year
    if full > current + 20:
        full -= 100
    elif full <= current - 80:
        full += 100
    return full


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. parse_http_date(): ordered layout table, first match wins, lenient
# 2. format_http_date(): always RFC 1123 in GMT
# 3. to_epoch_seconds(): whole-second truncation for If-Modified-Since
#
# Round trip: parse_http_date(format_http_date(t)) == t truncated to seconds.
# =============================================================================
