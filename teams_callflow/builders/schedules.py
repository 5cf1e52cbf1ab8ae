"""Weekly business hours and holiday date ranges.

Teams stores times as ``HH:MM:SS`` and marks end-of-day as ``1.00:00:00``. A day whose
only range is ``00:00:00`` to ``1.00:00:00`` is open around the clock; a schedule that is
open around the clock on all seven days is the "always open" sentinel, which means no
after-hours handling is configured.
"""

from __future__ import annotations

from datetime import datetime
import logging
import re
from typing import List, Optional, Sequence, Tuple

from teams_callflow.errors import ConfigurationAmbiguityError
from teams_callflow.models.tenant import WEEKDAYS, FixedSchedule, TimeRange, WeeklyRecurrentSchedule

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

_TIME = re.compile(r"^(?:(\d+)\.)?(\d{1,2}):(\d{2})(?::(\d{2})(?:\.\d+)?)?$")


def parse_time(value: str) -> int:
    """Return minutes since midnight for ``HH:MM[:SS]`` or ``D.HH:MM:SS``."""
    m = _TIME.match((value or "").strip())
    if not m:
        raise ConfigurationAmbiguityError(f"Unrecognised time value {value!r}")
    days, hours, minutes = int(m.group(1) or 0), int(m.group(2)), int(m.group(3))
    if hours > 23 or minutes > 59:
        raise ConfigurationAmbiguityError(f"Time value out of range {value!r}")
    total = days * MINUTES_PER_DAY + hours * 60 + minutes
    if total > MINUTES_PER_DAY:
        raise ConfigurationAmbiguityError(f"Time value beyond end of day {value!r}")
    return total


def format_minutes(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


def parse_ranges(ranges: Sequence[TimeRange]) -> List[Tuple[int, int]]:
    parsed = []
    for r in ranges:
        start, end = parse_time(r.start), parse_time(r.end)
        if end <= start:
            raise ConfigurationAmbiguityError(f"Time range ends before it starts: {r.start} - {r.end}")
        parsed.append((start, end))
    return sorted(parsed)


def is_full_day(ranges: Sequence[Tuple[int, int]]) -> bool:
    return len(ranges) == 1 and ranges[0] == (0, MINUTES_PER_DAY)


def is_always_open(schedule: Optional[WeeklyRecurrentSchedule]) -> bool:
    """True when the weekly schedule matches the always-open sentinel on every weekday."""
    if schedule is None:
        return True
    days = [parse_ranges(schedule.hours_for(day)) for day in WEEKDAYS]
    if schedule.complement_enabled:
        return all(not ranges for ranges in days)
    return all(is_full_day(ranges) for ranges in days)


def day_hours_label(day: str, ranges: Sequence[TimeRange]) -> str:
    parsed = parse_ranges(ranges)
    if not parsed:
        text = "Closed"
    elif is_full_day(parsed):
        text = "Open 24 Hours"
    else:
        text = ", ".join(f"{format_minutes(start)} - {format_minutes(end)}" for start, end in parsed)
    return f"{day} Hours: {text}"


def business_hours_lines(schedule: WeeklyRecurrentSchedule) -> List[str]:
    lines = [day_hours_label(day, schedule.hours_for(day)) for day in WEEKDAYS]
    if schedule.complement_enabled:
        lines.append("Listed hours are outside business hours")
    return lines


def format_timestamp(value: str) -> str:
    """Render an ISO timestamp as ``YYYY-MM-DD HH:MM``; unknown formats pass through."""
    text = (value or "").strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).strftime("%Y-%m-%d %H:%M")
    except ValueError:
        logger.debug("Leaving unparsed timestamp %r as is", value)
        return value


def holiday_lines(schedule: Optional[FixedSchedule]) -> List[str]:
    if schedule is None or not schedule.date_time_ranges:
        return ["No dates configured"]
    lines = []
    for r in schedule.date_time_ranges:
        lines.append(f"Start: {format_timestamp(r.start)}")
        lines.append(f"End: {format_timestamp(r.end)}")
    return lines


__all__ = [
    "parse_time",
    "format_minutes",
    "parse_ranges",
    "is_full_day",
    "is_always_open",
    "day_hours_label",
    "business_hours_lines",
    "format_timestamp",
    "holiday_lines",
]
