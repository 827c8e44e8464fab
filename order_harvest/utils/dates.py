"""Date helpers shared by the segmenter, normalizer and routes."""

from datetime import date, datetime, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

NOT_AVAILABLE = "N/A"

# date.weekday(): Monday == 0 ... Sunday == 6
MONDAY = 0
SUNDAY = 6


def parse_iso_date(value: Union[str, date, None]) -> Optional[date]:
    """
    Parse a YYYY-MM-DD value.

    Returns None for empty input; raises ValueError for malformed strings.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if not text:
        return None
    return date.fromisoformat(text)


def parse_timestamp(value: object) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (trailing 'Z' allowed). None when unparseable."""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_delivery_date(value: object, tz: Optional[tzinfo] = None) -> str:
    """
    Format a delivery timestamp as DD.MM.YYYY, or "N/A".

    Aware timestamps are converted to ``tz`` first when one is given.
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return NOT_AVAILABLE
    if tz is not None and parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz)
    return parsed.strftime("%d.%m.%Y")


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown time zone: {name}") from exc
