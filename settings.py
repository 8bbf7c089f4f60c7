"""Service configuration read from environment variables (and an optional .env file)."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    default_method: int = 3
    orange_minutes: int = 30
    red_minutes: int = 10
    max_days: int = 31
    log_level: str = "INFO"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def get_settings() -> Settings:
    return Settings(
        default_method=_int_env("PRAYER_DEFAULT_METHOD", 3),
        orange_minutes=_int_env("PRAYER_ORANGE_MINUTES", 30),
        red_minutes=_int_env("PRAYER_RED_MINUTES", 10),
        max_days=_int_env("PRAYER_MAX_DAYS", 31),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
