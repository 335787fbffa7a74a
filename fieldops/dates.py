"""Civil-day helpers for a fixed IANA time zone.

Visits are grouped into reports by the calendar day on which they were
completed, as seen on the wall clock of the crews' zone, while the store
keeps UTC instants. ``resolve_day_range`` bridges the two.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

PLACEHOLDER = "—"

_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_ONE_DAY = timedelta(days=1)
_TICK = timedelta(microseconds=1)


@dataclass(frozen=True, slots=True)
class DayRange:
    """Half-open UTC interval ``[start, end)`` covering one civil day."""

    start: datetime
    end: datetime

    def __contains__(self, instant: datetime) -> bool:
        return self.start <= instant < self.end


def _as_zone(time_zone: str | ZoneInfo) -> ZoneInfo:
    return time_zone if isinstance(time_zone, ZoneInfo) else ZoneInfo(time_zone)


def parse_date(value: str | None) -> date | None:
    """Parse a strict ``YYYY-MM-DD`` string; None when malformed or impossible."""
    if not value:
        return None
    match = _DATE_RE.match(value.strip())
    if match is None:
        return None
    try:
        return date(*(int(part) for part in match.groups()))
    except ValueError:
        return None


def _offset_at(instant: datetime, zone: ZoneInfo) -> timedelta:
    return instant.astimezone(zone).utcoffset() or timedelta(0)


def _local_date(instant: datetime, zone: ZoneInfo) -> date:
    return instant.astimezone(zone).date()


def zoned_midnight_to_utc(day: date, time_zone: str | ZoneInfo) -> datetime:
    """Return the first UTC instant whose wall-clock date in the zone is ``day``.

    Local midnight is tried under every offset in force within a day of
    the provisional instant (local midnight treated as UTC). When clocks go
    back across midnight, midnight occurs twice and the earlier reading is
    the start. A candidate counts only if the microsecond before it falls
    on an earlier date.
    """
    zone = _as_zone(time_zone)
    provisional = datetime.combine(day, time.min, tzinfo=timezone.utc)

    offsets = {_offset_at(provisional + shift, zone) for shift in (-_ONE_DAY, timedelta(0), _ONE_DAY)}
    candidates = sorted(provisional - offset for offset in offsets)
    for candidate in candidates:
        if _local_date(candidate, zone) == day and _local_date(candidate - _TICK, zone) < day:
            return candidate

    # Midnight falls in a gap: the day starts at the transition itself
    before = max(c for c in candidates if _local_date(c, zone) < day)
    after = min(c for c in candidates if c > before)
    while after - before > _TICK:
        middle = before + (after - before) / 2
        if _local_date(middle, zone) < day:
            before = middle
        else:
            after = middle
    return after


def resolve_day_range(date_string: str | None, time_zone: str | ZoneInfo) -> DayRange | None:
    """Convert a civil date in a zone to its UTC ``[start, end)`` interval.

    Returns None for malformed or impossible dates, which callers must
    surface as invalid input.
    """
    day = parse_date(date_string)
    if day is None:
        return None

    start = zoned_midnight_to_utc(day, time_zone)
    end = zoned_midnight_to_utc(day + timedelta(days=1), time_zone)
    return DayRange(start=start, end=end)


def today_in_zone(time_zone: str | ZoneInfo, now: datetime | None = None) -> str:
    """Current civil date in the zone as ``YYYY-MM-DD``."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(_as_zone(time_zone)).date().isoformat()


def format_local_datetime(
    instant: datetime | None,
    time_zone: str | ZoneInfo,
    fmt: str = "%d/%m/%Y %H:%M",
) -> str:
    """Format a UTC instant on the zone's wall clock."""
    if instant is None:
        return PLACEHOLDER
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(_as_zone(time_zone)).strftime(fmt)


def format_date_label(value: date | str | None, fmt: str = "%d/%m/%Y") -> str:
    """Format a date-only value without any zone conversion."""
    if value is None or value == "":
        return PLACEHOLDER
    if isinstance(value, str):
        parsed = parse_date(value)
        if parsed is None:
            return value
        value = parsed
    return value.strftime(fmt)
