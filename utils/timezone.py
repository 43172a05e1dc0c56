"""
Time handling for the billing service.

Timestamps (created_at, updated_at, session expiry) are stored in UTC.
Document dates are calendar days in the business timezone, so an invoice
raised at 01:00 IST carries the Indian date, not the previous UTC day.
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

BUSINESS_TIMEZONE = "Asia/Kolkata"


def now_utc() -> datetime:
    """Timezone-aware current time in UTC. Never use datetime.now() directly."""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """Normalize an aware datetime to UTC. Naive values are rejected."""
    if dt.tzinfo is None:
        raise ValueError("Cannot convert naive datetime to UTC; attach a timezone first")
    return dt.astimezone(timezone.utc)


def to_local(dt: datetime, tz_name: str = BUSINESS_TIMEZONE) -> datetime:
    """
    Convert an aware datetime to a named IANA timezone.

    Raises:
        ValueError: If dt is naive or tz_name is not a known zone
    """
    if dt.tzinfo is None:
        raise ValueError("Cannot localize naive datetime; attach a timezone first")

    try:
        zone = ZoneInfo(tz_name)
    except (KeyError, ValueError):
        raise ValueError(f"Unknown timezone: {tz_name}")

    return dt.astimezone(zone)


def parse_iso(value: str) -> datetime:
    """
    Parse a stored ISO 8601 timestamp back into a UTC datetime.

    Used for values serialized with isoformat() (session records). A
    string without an offset is ambiguous and raises ValueError.
    """
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        raise ValueError(f"Timestamp '{value}' has no timezone offset")
    return to_utc(dt)


def business_today(tz_name: str = BUSINESS_TIMEZONE) -> date:
    """Today's calendar date at the business location."""
    return to_local(now_utc(), tz_name).date()
