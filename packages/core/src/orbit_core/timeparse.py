"""12-hour time string helpers.

Every parser here returns ``None`` for input without a recognisable
``H:MM AM/PM`` token ("All Day", free text, empty). ``None`` never fires an
alert and sorts ahead of timed entries.
"""
from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})\s?([AP]M)", re.IGNORECASE)

MINUTES_PER_DAY = 24 * 60


def start_of_range(text: Optional[str]) -> str:
    """Return the part of a "09:00 AM - 10:00 AM" range before the dash."""
    if not text:
        return ""
    return text.split("-")[0].strip()


def parse_minutes(text: Optional[str]) -> Optional[int]:
    """Minutes since midnight of the first 12-hour time found in ``text``."""
    if not text:
        return None
    match = _TIME_RE.search(text)
    if not match:
        return None
    hours = int(match.group(1))
    minutes = int(match.group(2))
    if hours > 12 or minutes > 59:
        return None
    period = match.group(3).upper()
    if period == "PM" and hours != 12:
        hours += 12
    if period == "AM" and hours == 12:
        hours = 0
    return hours * 60 + minutes


def parse_start_minutes(time_range: Optional[str]) -> Optional[int]:
    return parse_minutes(start_of_range(time_range))


def format_12h(minutes: int) -> str:
    """Format minutes since midnight as zero-padded ``HH:MM AM/PM``."""
    minutes %= MINUTES_PER_DAY
    h, m = divmod(minutes, 60)
    period = "PM" if h >= 12 else "AM"
    display = h % 12 or 12
    return f"{display:02d}:{m:02d} {period}"


def minutes_of_day(now: datetime) -> int:
    return now.hour * 60 + now.minute


def sort_key(text: Optional[str]) -> int:
    """Ordering key for schedule entries; unparseable entries come first."""
    value = parse_start_minutes(text)
    return -1 if value is None else value


__all__ = [
    "start_of_range",
    "parse_minutes",
    "parse_start_minutes",
    "format_12h",
    "minutes_of_day",
    "sort_key",
    "MINUTES_PER_DAY",
]
