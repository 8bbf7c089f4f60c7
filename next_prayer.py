"""
Next prayer and urgency helpers for a refreshing clock display.
Every function takes the current local time as an argument.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Mapping

_TIME_RE = re.compile(r"(\d{2}):(\d{2})")


@dataclass(frozen=True)
class PrayerInfo:
    key: str
    label: str


# Sunrise is not a prayer and is never "next"
PRAYERS: tuple[PrayerInfo, ...] = (
    PrayerInfo("fajr", "Fajr"),
    PrayerInfo("dhuhr", "Dhuhr"),
    PrayerInfo("asr", "Asr"),
    PrayerInfo("maghrib", "Maghrib"),
    PrayerInfo("isha", "Isha"),
)


@dataclass(frozen=True)
class NextPrayer:
    key: str
    label: str
    time: str
    # Resolved instant; later than the clock string's day when the prayer falls after midnight
    at: datetime | None = field(default=None, compare=False)


class Urgency(str, Enum):
    GREEN = "green"
    ORANGE = "orange"
    RED = "red"


@dataclass(frozen=True)
class UrgencyThresholds:
    """Minutes before a prayer at which the display turns orange, then red (red < orange)."""

    orange_minutes: int = 30
    red_minutes: int = 10


def today_string(now: datetime) -> str:
    """'YYYY-MM-DD' key for caching a day's prayer times."""
    return now.strftime("%Y-%m-%d")


def parse_time(time_str: str, now: datetime) -> datetime | None:
    """
    Parse "HH:MM" (or "HH:MM (TZ)") as a clock time on now's calendar day.
    Returns None if no valid time is found.
    """
    match = _TIME_RE.search(time_str)
    if not match:
        return None
    try:
        return now.replace(hour=int(match.group(1)), minute=int(match.group(2)), second=0, microsecond=0)
    except ValueError:
        return None


def format_time(time_str: str, use_24h: bool = True) -> str:
    """Display a "HH:MM" time as 24h ("05:07") or 12h ("5:07 AM"). Unparseable input is returned as-is."""
    match = _TIME_RE.search(time_str)
    if not match:
        return time_str
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return time_str
    if use_24h:
        return f"{hour:02d}:{minute:02d}"
    suffix = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12}:{minute:02d} {suffix}"


def resolve_prayer_times(times: Mapping[str, str], now: datetime) -> dict[str, datetime | None]:
    """
    Place each prayer of a day's set on the calendar, starting from now's day.
    A clock time earlier than the prayer before it belongs to the following day
    (an Isha after midnight shows up as "01:07"). Unparseable times map to None.
    """
    resolved: dict[str, datetime | None] = {}
    previous: datetime | None = None
    for prayer in PRAYERS:
        prayer_time = parse_time(times[prayer.key], now)
        if prayer_time is not None and previous is not None:
            if prayer_time < previous:
                prayer_time += timedelta(days=1)
        if prayer_time is not None:
            previous = prayer_time
        resolved[prayer.key] = prayer_time
    return resolved


def get_next_prayer(times: Mapping[str, str], now: datetime) -> NextPrayer:
    """
    First prayer (Fajr, Dhuhr, Asr, Maghrib, Isha) still ahead of `now`.
    After Isha, returns Fajr with today's time string, meaning tomorrow's Fajr.
    """
    resolved = resolve_prayer_times(times, now)
    for prayer in PRAYERS:
        prayer_time = resolved[prayer.key]
        if prayer_time is not None and now < prayer_time:
            return NextPrayer(prayer.key, prayer.label, times[prayer.key], prayer_time)

    first = PRAYERS[0]
    fajr = resolved[first.key]
    tomorrow = fajr + timedelta(days=1) if fajr is not None else None
    return NextPrayer(first.key, first.label, times[first.key], tomorrow)


def _urgency(prayer_time: datetime | None, thresholds: UrgencyThresholds, now: datetime) -> Urgency:
    if prayer_time is None:
        return Urgency.GREEN

    diff_minutes = (prayer_time - now).total_seconds() / 60.0
    if diff_minutes <= 0:
        # Already passed (probably tomorrow's Fajr)
        return Urgency.GREEN
    if diff_minutes <= thresholds.red_minutes:
        return Urgency.RED
    if diff_minutes <= thresholds.orange_minutes:
        return Urgency.ORANGE
    return Urgency.GREEN


def get_urgency_status(time_str: str, thresholds: UrgencyThresholds, now: datetime) -> Urgency:
    """
    Urgency for a prayer at `time_str` today: red within red_minutes, orange within
    orange_minutes (both inclusive), otherwise green. Past or unparseable times are green.
    """
    return _urgency(parse_time(time_str, now), thresholds, now)


def get_next_prayer_urgency(next_prayer: NextPrayer, thresholds: UrgencyThresholds, now: datetime) -> Urgency:
    """Urgency of a result of get_next_prayer, counting a prayer after midnight as tomorrow's."""
    if next_prayer.at is None:
        return get_urgency_status(next_prayer.time, thresholds, now)
    return _urgency(next_prayer.at, thresholds, now)
