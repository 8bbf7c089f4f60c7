import logging
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, HTTPException, Query

from next_prayer import UrgencyThresholds, format_time, get_next_prayer, get_next_prayer_urgency
from prayer_times import PRAYER_KEYS, IshaAngle, compute_prayer_times, compute_prayer_times_range, list_methods
from settings import get_settings

logging.basicConfig(
    level=get_settings().log_level,
    format='%(asctime)s - %(levelname)s - %(name)s - %(message)s',
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Prayer Times API",
    description="API service for calculating Islamic prayer times",
    version="1.0.0"
)


@app.get("/")
def root():
    return {
        "service": "Prayer Times API",
        "status": "online",
        "endpoints": {
            "/api/methods": "List supported calculation methods",
            "/api/timesForGPS": "Get prayer times for GPS coordinates",
            "/api/nextPrayer": "Get the next prayer and its urgency",
        }
    }


@app.get("/api/methods")
def get_methods():
    methods = []
    for method in list_methods():
        entry = {"id": method.method_id, "name": method.name, "fajrAngle": method.fajr_angle}
        if isinstance(method.isha, IshaAngle):
            entry["ishaAngle"] = method.isha.degrees
        else:
            entry["ishaMinutes"] = method.isha.minutes
        methods.append(entry)
    return {"methods": methods}


def _parse_date(date: str):
    try:
        return datetime.strptime(date, "%Y-%m-%d").date()
    except ValueError:
        logger.warning("Rejected date: %r", date)
        raise HTTPException(status_code=400, detail="date must be YYYY-MM-DD")


@app.get("/api/timesForGPS")
def get_times_for_gps(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    date: str = Query(..., description="YYYY-MM-DD"),
    days: int = 1,
    timezoneOffset: int = 0,  # Minutes east of UTC, e.g. 180 for UTC+3
    calculationMethod: Optional[int] = None,
    asrFactor: float = Query(1.0, gt=0),
):
    settings = get_settings()
    if days < 1 or days > settings.max_days:
        logger.warning("Rejected days=%s", days)
        raise HTTPException(status_code=400, detail=f"days must be between 1 and {settings.max_days}")

    start_date = _parse_date(date)
    # Convert minutes to hours (e.g., 180 -> 3.0)
    offset_hours = timezoneOffset / 60.0
    method = settings.default_method if calculationMethod is None else calculationMethod
    logger.info("timesForGPS lat=%s lng=%s date=%s days=%s method=%s", lat, lng, date, days, method)

    by_date = compute_prayer_times_range(
        start_date, days, lat, lng, offset_hours, method, asr_factor=asrFactor
    )

    # [0]: Fajr, [1]: Sunrise, [2]: Dhuhr, [3]: Asr, [4]: Maghrib, [5]: Isha
    response_times = {
        date_key: [t[key] for key in PRAYER_KEYS]
        for date_key, t in by_date.items()
    }
    return {"times": response_times}


@app.get("/api/nextPrayer")
def get_next_prayer_for_gps(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    now: datetime = Query(..., description="Local time, e.g. 2024-06-21T14:30"),
    timezoneOffset: int = 0,
    calculationMethod: Optional[int] = None,
    use24h: bool = True,
):
    settings = get_settings()
    method = settings.default_method if calculationMethod is None else calculationMethod
    now = now.replace(tzinfo=None)
    times = compute_prayer_times(now.date(), lat, lng, timezoneOffset / 60.0, method)

    next_prayer = get_next_prayer(times, now)
    thresholds = UrgencyThresholds(settings.orange_minutes, settings.red_minutes)
    urgency = get_next_prayer_urgency(next_prayer, thresholds, now)
    logger.info(
        "nextPrayer lat=%s lng=%s now=%s -> %s %s", lat, lng, now.isoformat(), next_prayer.key, next_prayer.time
    )

    return {
        "date": now.date().isoformat(),
        "prayer": next_prayer.key,
        "label": next_prayer.label,
        "time": next_prayer.time,
        "display": format_time(next_prayer.time, use24h),
        "urgency": urgency.value,
        "at": next_prayer.at.isoformat() if next_prayer.at is not None else None,
        "times": dict(times),
    }
