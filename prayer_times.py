"""
Prayer times calculation using astronomical formulas (USNO approximate solar coordinates).
Fajr/Isha use per-method depression angles (or a fixed interval after Maghrib),
Asr uses the shadow-length rule (shadow = factor × object + noon shadow).
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Literal, TypedDict, Union

logger = logging.getLogger(__name__)


class PrayerTimesResult(TypedDict):
    fajr: str
    sunrise: str
    dhuhr: str
    asr: str
    maghrib: str
    isha: str


PRAYER_KEYS: tuple[str, ...] = ("fajr", "sunrise", "dhuhr", "asr", "maghrib", "isha")

Side = Literal["before_noon", "after_noon"]

# Sunrise/sunset: sun center 0.833° below horizon (refraction + solar radius)
SUNRISE_SUNSET_ANGLE = 0.833
# Dhuhr is shifted one minute past solar noon
DHUHR_MARGIN_MINUTES = 1.0
UNSOLVED_TIME = "--:--"


def _deg2rad(d: float) -> float:
    return d * math.pi / 180.0


def _rad2deg(r: float) -> float:
    return r * 180.0 / math.pi


def _normalize_angle_360(degrees: float) -> float:
    """Normalize angle to [0, 360)."""
    d = degrees % 360.0
    return d if d >= 0 else d + 360.0


def fix_hour(hours: float) -> float:
    """Normalize hour to [0, 24)."""
    h = hours % 24.0
    return h if h >= 0 else h + 24.0


# --- Solar ephemeris ---


def julian_day(year: int, month: int, day: int) -> float:
    """Julian day at 0h UT of the given Gregorian date."""
    if month <= 2:
        year -= 1
        month += 12
    A = math.floor(year / 100)
    B = 2 - A + math.floor(A / 4)
    return math.floor(365.25 * (year + 4716)) + math.floor(30.6001 * (month + 1)) + day + B - 1524.5


def _solar_coordinates(jd: float) -> tuple[float, float, float]:
    """
    Mean longitude q (degrees), ecliptic longitude L (radians) and obliquity e (radians).
    """
    D = jd - 2451545.0
    g = _deg2rad(_normalize_angle_360(357.529 + 0.98560028 * D))
    q = _normalize_angle_360(280.459 + 0.98564736 * D)
    L = _deg2rad(_normalize_angle_360(q + 1.915 * math.sin(g) + 0.020 * math.sin(2 * g)))
    e = _deg2rad(23.439 - 0.00000036 * D)
    return q, L, e


def sun_declination(jd: float) -> float:
    """Solar declination in degrees."""
    _, L, e = _solar_coordinates(jd)
    return _rad2deg(math.asin(math.sin(e) * math.sin(L)))


def equation_of_time(jd: float) -> float:
    """Equation of time in hours: mean solar time minus apparent right ascension."""
    q, L, e = _solar_coordinates(jd)
    # Right ascension (same quadrant as L)
    RA_hours = _rad2deg(math.atan2(math.cos(e) * math.sin(L), math.cos(L))) / 15.0
    return q / 15.0 - fix_hour(RA_hours)


# --- Hour-angle solver ---


def solar_noon(jd: float, lng_deg: float, utc_offset_hours: float) -> float:
    """Solar noon in local civil time as decimal hours. utc_offset_hours is east-positive (UTC+3 -> 3)."""
    return fix_hour(12.0 - equation_of_time(jd) - lng_deg / 15.0 + utc_offset_hours)


def _hour_angle_hours(lat_deg: float, decl_deg: float, altitude_rad: float) -> float | None:
    """
    Hours from solar noon until the sun reaches the given altitude.
    Returns None if the sun never reaches that altitude (polar day/night).
    """
    lat_r = _deg2rad(lat_deg)
    decl_r = _deg2rad(decl_deg)
    # sin(altitude) = sin(lat)*sin(decl) + cos(lat)*cos(decl)*cos(omega)
    cos_omega = (math.sin(altitude_rad) - math.sin(lat_r) * math.sin(decl_r)) / (
        math.cos(lat_r) * math.cos(decl_r)
    )
    if cos_omega < -1 or cos_omega > 1:
        return None
    return _rad2deg(math.acos(cos_omega)) / 15.0


def time_for_angle(
    jd: float,
    altitude_deg: float,
    lat_deg: float,
    lng_deg: float,
    utc_offset_hours: float,
    side: Side,
) -> float | None:
    """
    Local time (decimal hours) when the sun's center is at altitude_deg.
    altitude_deg: negative = below horizon (e.g. -18 for Fajr, -0.833 for sunrise).
    side: "before_noon" for morning events, "after_noon" for evening events.
    """
    hours = _hour_angle_hours(lat_deg, sun_declination(jd), _deg2rad(altitude_deg))
    if hours is None:
        return None
    noon = solar_noon(jd, lng_deg, utc_offset_hours)
    return noon - hours if side == "before_noon" else noon + hours


def asr_time(
    jd: float,
    lat_deg: float,
    lng_deg: float,
    utc_offset_hours: float,
    shadow_factor: float = 1.0,
) -> float | None:
    """
    Asr: shadow = shadow_factor × object height + noon shadow.
    shadow_factor: 1 for the standard (Shafi'i) rule, 2 for the Hanafi rule.
    """
    decl = sun_declination(jd)
    # cot(altitude) = shadow_factor + tan(|lat - decl|)
    A = abs(_deg2rad(lat_deg) - _deg2rad(decl))
    asr_altitude = math.atan(1.0 / (shadow_factor + math.tan(A)))
    hours = _hour_angle_hours(lat_deg, decl, asr_altitude)
    if hours is None:
        return None
    return solar_noon(jd, lng_deg, utc_offset_hours) + hours


# --- Calculation methods ---


@dataclass(frozen=True)
class IshaAngle:
    """Isha when the sun is `degrees` below the horizon after sunset."""

    degrees: float

    def isha_time(
        self, jd: float, lat: float, lng: float, utc_offset_hours: float, maghrib: float | None
    ) -> float | None:
        return time_for_angle(jd, -self.degrees, lat, lng, utc_offset_hours, "after_noon")


@dataclass(frozen=True)
class IshaInterval:
    """Isha a fixed number of minutes after Maghrib."""

    minutes: float

    def isha_time(
        self, jd: float, lat: float, lng: float, utc_offset_hours: float, maghrib: float | None
    ) -> float | None:
        if maghrib is None:
            return None
        return maghrib + self.minutes / 60.0


IshaRule = Union[IshaAngle, IshaInterval]


@dataclass(frozen=True)
class MethodAngles:
    method_id: int
    name: str
    fajr_angle: float
    isha: IshaRule


_METHODS = (
    MethodAngles(0, "Shia Ithna-Ashari", 16, IshaAngle(14)),
    MethodAngles(1, "University of Islamic Sciences, Karachi", 18, IshaAngle(18)),
    MethodAngles(2, "Islamic Society of North America (ISNA)", 15, IshaAngle(15)),
    MethodAngles(3, "Muslim World League", 18, IshaAngle(17)),
    MethodAngles(4, "Umm Al-Qura University, Makkah", 18.5, IshaInterval(90)),
    MethodAngles(5, "Egyptian General Authority of Survey", 19.5, IshaAngle(17.5)),
    MethodAngles(7, "Institute of Geophysics, University of Tehran", 17.7, IshaAngle(14)),
    MethodAngles(8, "Gulf Region", 19.5, IshaInterval(90)),
    MethodAngles(9, "Kuwait", 18, IshaAngle(17.5)),
    MethodAngles(10, "Qatar", 18, IshaInterval(90)),
    MethodAngles(11, "Majlis Ugama Islam Singapura", 20, IshaAngle(18)),
    MethodAngles(12, "UOIF (France)", 12, IshaAngle(12)),
    MethodAngles(13, "Diyanet (Turkey)", 18, IshaAngle(17)),
    MethodAngles(14, "Spiritual Administration of Muslims of Russia", 16, IshaAngle(15)),
    MethodAngles(15, "Moonsighting Committee Worldwide", 18, IshaAngle(18)),
)

METHODS: dict[int, MethodAngles] = {m.method_id: m for m in _METHODS}

DEFAULT_METHOD_ID = 3  # Muslim World League


def get_method(method_id: int) -> MethodAngles:
    """Look up a calculation method, falling back to Muslim World League for unknown ids."""
    method = METHODS.get(method_id)
    if method is None:
        logger.debug("Unknown calculation method %s, using %s", method_id, DEFAULT_METHOD_ID)
        return METHODS[DEFAULT_METHOD_ID]
    return method


def list_methods() -> list[MethodAngles]:
    return [METHODS[k] for k in sorted(METHODS)]


# --- Formatting ---


def format_decimal_hour(h: float | None) -> str:
    """
    Convert decimal hours to 'HH:MM' 24h format, '--:--' when unsolved.
    Values outside [0, 24) wrap around midnight; a minute that rounds to 60 carries into the hour.
    """
    if h is None or math.isnan(h):
        return UNSOLVED_TIME
    h = fix_hour(h)
    hour = int(math.floor(h))
    minute = int(round((h - hour) * 60))
    if minute >= 60:
        minute = 0
        hour += 1
    if hour >= 24:
        hour = 0
    return f"{hour:02d}:{minute:02d}"


# --- Orchestration ---


def compute_decimal_times(
    day: date,
    lat: float,
    lng: float,
    utc_offset_hours: float,
    method_id: int = DEFAULT_METHOD_ID,
    asr_factor: float = 1.0,
) -> dict[str, float | None]:
    """Unformatted prayer times for one day, as local decimal hours (None when unsolvable)."""
    method = get_method(method_id)
    jd = julian_day(day.year, day.month, day.day)

    fajr = time_for_angle(jd, -method.fajr_angle, lat, lng, utc_offset_hours, "before_noon")
    sunrise = time_for_angle(jd, -SUNRISE_SUNSET_ANGLE, lat, lng, utc_offset_hours, "before_noon")
    dhuhr = solar_noon(jd, lng, utc_offset_hours) + DHUHR_MARGIN_MINUTES / 60.0
    asr = asr_time(jd, lat, lng, utc_offset_hours, asr_factor)
    maghrib = time_for_angle(jd, -SUNRISE_SUNSET_ANGLE, lat, lng, utc_offset_hours, "after_noon")
    isha = method.isha.isha_time(jd, lat, lng, utc_offset_hours, maghrib)

    times = dict(zip(PRAYER_KEYS, (fajr, sunrise, dhuhr, asr, maghrib, isha)))
    unsolved = [k for k, v in times.items() if v is None]
    if unsolved:
        logger.debug("No solution on %s at lat=%s for: %s", day.isoformat(), lat, ", ".join(unsolved))
    return times


def compute_prayer_times(
    day: date,
    lat: float,
    lng: float,
    utc_offset_hours: float,
    method_id: int = DEFAULT_METHOD_ID,
    asr_factor: float = 1.0,
) -> PrayerTimesResult:
    """
    Get prayer times for one day.
    utc_offset_hours: local civil time minus UTC, e.g. 3 for Turkey, 5.5 for India.
    method_id: calculation method id (see METHODS); unknown ids use Muslim World League.
    Returns dict with fajr, sunrise, dhuhr, asr, maghrib, isha as 'HH:MM' strings
    ('--:--' where the sun never reaches the required position).
    """
    times = compute_decimal_times(day, lat, lng, utc_offset_hours, method_id, asr_factor)
    return PrayerTimesResult(**{key: format_decimal_hour(times[key]) for key in PRAYER_KEYS})


def compute_prayer_times_range(
    start: date,
    days: int,
    lat: float,
    lng: float,
    utc_offset_hours: float,
    method_id: int = DEFAULT_METHOD_ID,
    asr_factor: float = 1.0,
) -> dict[str, PrayerTimesResult]:
    """Prayer times for `days` consecutive days, keyed by 'YYYY-MM-DD'."""
    result: dict[str, PrayerTimesResult] = {}
    for i in range(days):
        current_day = start + timedelta(days=i)
        result[current_day.isoformat()] = compute_prayer_times(
            current_day, lat, lng, utc_offset_hours, method_id, asr_factor
        )
    return result
