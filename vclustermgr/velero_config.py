"""Velero TTL conversions, BSL values generation and date display helpers."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from fractions import Fraction

__all__ = [
    "parse_ttl_text",
    "ttl_to_text",
    "generate_velero_values_yaml",
    "format_date",
]

_TTL_SUFFIXES = ("j", "h", "m")
_INTEGER = re.compile(r"[+-]?\d+")

_NANOS_PER_MINUTE = 60 * 10**9
_MAX_DURATION_NANOS = 2**63 - 1
_DURATION_UNITS = {
    "ns": 1,
    "us": 10**3,
    "\u00b5s": 10**3,
    "\u03bcs": 10**3,
    "ms": 10**6,
    "s": 10**9,
    "m": 60 * 10**9,
    "h": 3600 * 10**9,
}
_DURATION_COMPONENT = re.compile(r"(\d*)(?:\.(\d*))?(ns|us|\u00b5s|\u03bcs|ms|s|m|h)")

_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})"
)
_DISPLAY_ZONE = "Europe/Paris"


def parse_ttl_text(text: str) -> str:
    """Turn a short TTL ("30j", "12h", "90m") into a Velero duration string.

    Returns an empty string when the input is empty or invalid.
    """
    text = text.strip().lower()
    if not text:
        return ""
    suffix = text[-1]
    if suffix not in _TTL_SUFFIXES:
        return ""
    digits = text[:-1]
    if not _INTEGER.fullmatch(digits):
        return ""
    n = int(digits)
    if n <= 0:
        return ""
    if suffix == "j":
        return f"{n * 24}h0m0s"
    if suffix == "h":
        return f"{n}h0m0s"
    return f"0h{n}m0s"


def _parse_duration(value: str) -> int:
    """Parse a duration such as "720h0m0s" or "1.5h" into nanoseconds."""
    original = value
    sign = 1
    if value[:1] in ("+", "-"):
        if value[0] == "-":
            sign = -1
        value = value[1:]
    if value == "0":
        return 0
    if not value:
        raise ValueError(f"invalid duration {original!r}")

    total = Fraction(0)
    pos = 0
    while pos < len(value):
        match = _DURATION_COMPONENT.match(value, pos)
        if match is None:
            raise ValueError(f"invalid duration {original!r}")
        whole, frac, unit = match.groups()
        if not whole and not frac:
            raise ValueError(f"invalid duration {original!r}")
        amount = Fraction(int(whole or "0"))
        if frac:
            amount += Fraction(int(frac), 10 ** len(frac))
        total += amount * _DURATION_UNITS[unit]
        pos = match.end()

    nanos = int(total)
    if nanos > _MAX_DURATION_NANOS:
        raise ValueError(f"invalid duration {original!r}")
    return sign * nanos


def ttl_to_text(ttl: str) -> str:
    """Turn a Velero duration ("720h0m0s") into its short form ("30j", "12h", "90m").

    An unparsable value is returned unchanged; a zero duration gives "".
    """
    if not ttl:
        return ""
    try:
        nanos = _parse_duration(ttl)
    except ValueError:
        return ttl
    magnitude = abs(nanos) // _NANOS_PER_MINUTE
    total = magnitude if nanos >= 0 else -magnitude
    if total == 0:
        return ""
    if total > 0:
        hours, minutes = divmod(total, 60)
        if minutes == 0 and hours > 0:
            if hours % 24 == 0:
                return f"{hours // 24}j"
            return f"{hours}h"
    return f"{total}m"


def generate_velero_values_yaml(bucket: str, s3_url: str) -> str:
    """Build the velero values.yaml describing the default backup storage location."""
    s3_line = f'\n        s3Url: "{s3_url}"' if s3_url else ""
    return (
        "configuration:\n"
        "  backupStorageLocation:\n"
        "    - name: default\n"
        "      provider: aws\n"
        f"      bucket: {bucket}\n"
        f"      config:{s3_line}\n"
        '        s3ForcePathStyle: "true"\n'
        '        checksumAlgorithm: ""\n'
    )


def _parse_rfc3339(value: str) -> datetime:
    match = _RFC3339.fullmatch(value)
    if match is None:
        raise ValueError(f"not an RFC 3339 timestamp: {value!r}")
    year, month, day, hour, minute, second, frac, zone = match.groups()
    micro = int((frac or "0")[:6].ljust(6, "0"))
    if zone == "Z":
        tz = timezone.utc
    else:
        zone_sign = -1 if zone[0] == "-" else 1
        zh, zm = int(zone[1:3]), int(zone[4:6])
        if zh > 23 or zm > 59:
            raise ValueError(f"invalid zone offset in {value!r}")
        tz = timezone(zone_sign * timedelta(hours=zh, minutes=zm))
    return datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=tz
    )


def format_date(s: str) -> str:
    """Format an RFC 3339 timestamp as "YYYY-MM-DD HH:MM" in Paris time.

    Input that is not a valid timestamp is returned unchanged.
    """
    try:
        moment = _parse_rfc3339(s)
    except ValueError:
        return s
    try:
        from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

        zone = ZoneInfo(_DISPLAY_ZONE)
    except (ImportError, ZoneInfoNotFoundError, ValueError):
        return moment.strftime("%Y-%m-%d %H:%M UTC")
    return moment.astimezone(zone).strftime("%Y-%m-%d %H:%M")