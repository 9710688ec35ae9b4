import os
from dotenv import load_dotenv
from aura.logger import logger
load_dotenv()

__all__ = [
    "OWNER_ID", "USER_TIMEZONE",
    "DB_PATH", "LOG_FILE", "LOG_LEVEL",
    "POLL_INTERVAL_SECONDS", "DUE_WINDOW_MINUTES",
    "SUGGESTION_COOLDOWN_MINUTES", "SUGGESTION_CHECK_SECONDS",
    "ENABLE_WEATHER_SUGGESTIONS", "WEATHER_LATITUDE", "WEATHER_LONGITUDE",
    "WEATHER_CACHE_SECONDS", "WEATHER_TIMEOUT_SECONDS",
    "ENABLE_ADMIN_HTTP", "ADMIN_HTTP_HOST", "ADMIN_HTTP_PORT", "ADMIN_AUTH_TOKEN",
]


def _parse_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on", "y")


def _parse_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not a number, falling back to {default}")
        return default


def _parse_optional_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not a number, ignoring it")
        return None


# Subject identity; the poller and the suggestion loop stay inert without it
OWNER_ID = os.getenv("AURA_OWNER_ID", "").strip() or None
USER_TIMEZONE = os.getenv("USER_TIMEZONE", "UTC")

DB_PATH = os.getenv("AURA_DB_PATH", "data/aura.db")
LOG_FILE = os.getenv("AURA_LOG_FILE", "logs/aura.log")
LOG_LEVEL = os.getenv("AURA_LOG_LEVEL", "DEBUG").strip().upper()


# Reminder delivery
POLL_INTERVAL_SECONDS = _parse_float("POLL_INTERVAL_SECONDS", 30.0)
DUE_WINDOW_MINUTES = _parse_float("DUE_WINDOW_MINUTES", 5.0)
if POLL_INTERVAL_SECONDS <= 0:
    logger.warning("POLL_INTERVAL_SECONDS must be positive, falling back to 30")
    POLL_INTERVAL_SECONDS = 30.0


# Contextual suggestions
SUGGESTION_COOLDOWN_MINUTES = _parse_float("SUGGESTION_COOLDOWN_MINUTES", 30.0)
SUGGESTION_CHECK_SECONDS = _parse_float("SUGGESTION_CHECK_SECONDS", 300.0)
ENABLE_WEATHER_SUGGESTIONS = _parse_bool("ENABLE_WEATHER_SUGGESTIONS", True)
WEATHER_LATITUDE = _parse_optional_float("WEATHER_LATITUDE")
WEATHER_LONGITUDE = _parse_optional_float("WEATHER_LONGITUDE")
WEATHER_CACHE_SECONDS = _parse_float("WEATHER_CACHE_SECONDS", 600.0)
WEATHER_TIMEOUT_SECONDS = _parse_float("WEATHER_TIMEOUT_SECONDS", 10.0)
if ENABLE_WEATHER_SUGGESTIONS and (WEATHER_LATITUDE is None or WEATHER_LONGITUDE is None):
    logger.warning("Weather suggestions are enabled but WEATHER_LATITUDE/WEATHER_LONGITUDE are not set")


# Admin API
ENABLE_ADMIN_HTTP = _parse_bool("ENABLE_ADMIN_HTTP", True)
ADMIN_HTTP_HOST = os.getenv("ADMIN_HTTP_HOST", "127.0.0.1")
ADMIN_HTTP_PORT = int(_parse_float("ADMIN_HTTP_PORT", 18080))
ADMIN_AUTH_TOKEN = os.getenv("ADMIN_AUTH_TOKEN", "")
