"""
Calendar and wall-clock helpers for venue time zones
"""
import re
from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from utils.errors import ValidationError

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown time zone: {name}")


def parse_event_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD string, raising ValidationError otherwise"""
    raw = (value or "").strip()
    if not DATE_RE.match(raw):
        raise ValidationError("event_date must be YYYY-MM-DD.")
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise ValidationError("event_date must be YYYY-MM-DD.")


def today_in_time_zone(time_zone: str, now: Optional[datetime] = None) -> date:
    """Calendar date at ``now`` (default: current instant) in ``time_zone``"""
    instant = now or datetime.now(timezone.utc)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(get_zone(time_zone)).date()


def utc_offset_at(instant: datetime, time_zone: str) -> timedelta:
    """
    Offset of ``time_zone`` at a UTC instant, found by formatting the instant
    as local wall-clock time and reading that wall clock back as if it were UTC
    """
    local = instant.astimezone(get_zone(time_zone))
    wall_as_utc = datetime(
        local.year, local.month, local.day,
        local.hour, local.minute, local.second,
        tzinfo=timezone.utc,
    )
    return wall_as_utc - instant


def start_at_for_local_time(event_date: date, time_zone: str, hour: int = 19) -> datetime:
    """
    UTC instant for ``hour``:00 local time on ``event_date`` in ``time_zone``

    Two passes: guess the offset at the naive instant, shift, then re-read the
    offset at the shifted instant and apply that one if it changed (the guess
    can land on the other side of a DST transition).
    """
    naive_utc = datetime(event_date.year, event_date.month, event_date.day, hour, tzinfo=timezone.utc)

    first_offset = utc_offset_at(naive_utc, time_zone)
    actual = naive_utc - first_offset

    second_offset = utc_offset_at(actual, time_zone)
    if second_offset != first_offset:
        actual = naive_utc - second_offset

    return actual


def to_utc_iso(value: Optional[datetime]) -> Optional[str]:
    """Serialise a stored (naive UTC) datetime with an explicit offset"""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()
