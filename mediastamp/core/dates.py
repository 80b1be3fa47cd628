"""Capture date parsing and display formatting.

Converts raw metadata date strings into timezone-aware datetimes and renders
them as filename-safe strings. Nothing here reads the system clock, so the
same input always yields the same name.
"""

import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from mediastamp.core.errors import ConfigError, TimestampInvalid

# Output pattern, e.g. 2023-05-10_14-22-31
DISPLAY_FORMAT = "%Y-%m-%d_%H-%M-%S"

# "YYYY:MM:DD HH:MM:SS" with optional sub-seconds and offset, which some
# cameras append to DateTimeOriginal
EXIF_DATETIME_REGEX = re.compile(
    r"^(\d{4}):(\d{2}):(\d{2}) (\d{2}):(\d{2}):(\d{2})(?:\.\d+)?(Z|[+-]\d{2}:?\d{2})?$"
)

OFFSET_REGEX = re.compile(r"^([+-])(\d{2}):?(\d{2})$")


def get_timezone(name: str) -> tzinfo:
    """Resolve an IANA timezone name.

    Args:
        name: Timezone name, e.g. "Europe/Amsterdam" or "UTC".

    Returns:
        ZoneInfo instance.

    Raises:
        ConfigError: If the name is unknown.
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, TypeError) as e:
        raise ConfigError(f"Unknown timezone: {name!r}") from e


def parse_offset(value: Optional[str]) -> Optional[timezone]:
    """Parse a UTC offset such as "+02:00", "-0530" or "Z".

    Returns:
        A fixed-offset timezone, or None if value is empty or malformed.
    """
    if not value:
        return None
    if value == "Z":
        return timezone.utc
    match = OFFSET_REGEX.match(value.strip())
    if not match:
        return None
    sign, hours, minutes = match.groups()
    delta = timedelta(hours=int(hours), minutes=int(minutes))
    if delta >= timedelta(hours=24):
        return None
    return timezone(-delta if sign == "-" else delta)


def parse_exif_datetime(
    value: str,
    offset: Optional[str] = None,
    default_tz: tzinfo = timezone.utc
) -> datetime:
    """Convert an EXIF date string to an aware datetime.

    The date portion's colons become dashes and the separating space becomes
    "T", giving an ISO-8601 string. EXIF dates carry no zone of their own, so
    the offset comes from (in order) the value itself, the OffsetTimeOriginal
    tag, or default_tz.

    Args:
        value: Raw DateTimeOriginal, e.g. "2023:05:10 14:22:31".
        offset: Raw OffsetTimeOriginal, e.g. "+02:00", or None.
        default_tz: Zone assumed for wall-clock values without an offset.

    Returns:
        Timezone-aware datetime.

    Raises:
        TimestampInvalid: If the value is malformed or not a real date
            (cameras without a set clock write "0000:00:00 00:00:00").

    Example:
        >>> parse_exif_datetime("2023:05:10 14:22:31")
        datetime.datetime(2023, 5, 10, 14, 22, 31, tzinfo=datetime.timezone.utc)
    """
    match = EXIF_DATETIME_REGEX.match(value.strip())
    if not match:
        raise TimestampInvalid(f"Unrecognized EXIF date: {value!r}")

    year, month, day, hour, minute, second, inline_offset = match.groups()
    iso = f"{year}-{month}-{day}T{hour}:{minute}:{second}"
    try:
        naive = datetime.fromisoformat(iso)
    except ValueError as e:
        raise TimestampInvalid(f"Invalid EXIF date: {value!r}") from e

    tz = parse_offset(inline_offset) or parse_offset(offset) or default_tz
    return naive.replace(tzinfo=tz)


def parse_iso_instant(value: str) -> datetime:
    """Parse an ISO-8601 instant such as ffprobe's creation_time.

    Values without an offset are taken as UTC, which is what QuickTime and
    MP4 containers store.

    Args:
        value: e.g. "2023-05-10T12:22:31.000000Z".

    Returns:
        Timezone-aware datetime.

    Raises:
        TimestampInvalid: If the value cannot be parsed.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise TimestampInvalid(f"Invalid ISO date: {value!r}") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_capture_date(instant: datetime, tz: tzinfo) -> str:
    """Render an instant in the display timezone as yyyy-MM-dd_HH-mm-ss.

    Sub-second precision is dropped. Naive datetimes are treated as UTC.

    Example:
        >>> format_capture_date(datetime(2023, 5, 10, 12, 22, 31, tzinfo=timezone.utc),
        ...                     ZoneInfo("Europe/Amsterdam"))
        '2023-05-10_14-22-31'
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(tz).strftime(DISPLAY_FORMAT)
