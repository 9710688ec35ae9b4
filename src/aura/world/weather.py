"""
Environmental context from Open-Meteo (free, no API key).

Only current conditions are requested. Any failure yields an unavailable
context, which the suggestion generator turns into "no suggestions".
"""

from __future__ import annotations

import time
from typing import Any, Callable

import httpx

from aura.datamodel import EnvironmentalContext
from aura.logger import logger
from aura.utils import now_utc, time_of_day, to_user_local

__all__ = ["OpenMeteoContextProvider", "context_from_current", "HOT_ABOVE_C", "COLD_BELOW_C"]

FORECAST_URL = "https://api.open-meteo.com/v1/forecast"

HOT_ABOVE_C = 30.0
COLD_BELOW_C = 12.0

# WMO weather interpretation codes that mean water is falling
_RAIN_CODES = frozenset({51, 53, 55, 56, 57, 61, 63, 65, 66, 67, 80, 81, 82, 95, 96, 99})

_DESCRIPTIONS = {
    0: "Clear sky", 1: "Mainly clear", 2: "Partly cloudy", 3: "Overcast",
    45: "Foggy", 48: "Depositing rime fog",
    51: "Light drizzle", 53: "Moderate drizzle", 55: "Dense drizzle",
    56: "Light freezing drizzle", 57: "Dense freezing drizzle",
    61: "Slight rain", 63: "Moderate rain", 65: "Heavy rain",
    66: "Light freezing rain", 67: "Heavy freezing rain",
    71: "Slight snow", 73: "Moderate snow", 75: "Heavy snow", 77: "Snow grains",
    80: "Slight rain showers", 81: "Moderate rain showers", 82: "Violent rain showers",
    85: "Slight snow showers", 86: "Heavy snow showers",
    95: "Thunderstorm", 96: "Thunderstorm with slight hail", 99: "Thunderstorm with heavy hail",
}


def _to_float(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def context_from_current(current: dict[str, Any], local_hour: int) -> EnvironmentalContext:
    """Build a context from the `current` block of an Open-Meteo response"""
    temperature = _to_float(current.get("temperature_2m"))
    humidity = _to_float(current.get("relative_humidity_2m"))
    code = current.get("weather_code")
    code = int(code) if isinstance(code, (int, float)) and not isinstance(code, bool) else None

    if temperature is None:
        return EnvironmentalContext(available=False)

    return EnvironmentalContext(
        temperature=temperature,
        humidity=humidity,
        precipitation=code in _RAIN_CODES,
        is_hot=temperature > HOT_ABOVE_C,
        is_cold=temperature < COLD_BELOW_C,
        time_of_day=time_of_day(local_hour),
        available=True,
        description=_DESCRIPTIONS.get(code, "Unknown") if code is not None else None,
    )


class OpenMeteoContextProvider:
    def __init__(
        self,
        latitude: float,
        longitude: float,
        user_timezone: str = "UTC",
        *,
        cache_seconds: float = 600.0,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.latitude = latitude
        self.longitude = longitude
        self.user_timezone = user_timezone
        self.cache_seconds = cache_seconds
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._clock = clock
        self._cached: EnvironmentalContext | None = None
        self._cached_at: float | None = None

    async def fetch_environmental_context(self) -> EnvironmentalContext:
        now = self._clock()
        if self._cached is not None and self._cached_at is not None and now - self._cached_at < self.cache_seconds:
            return self._cached

        params = {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "current": "temperature_2m,relative_humidity_2m,apparent_temperature,weather_code,wind_speed_10m",
            "timezone": "auto",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.get(FORECAST_URL, params=params)
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Weather fetch failed: {e}")
            return EnvironmentalContext(available=False)

        current = payload.get("current") if isinstance(payload, dict) else None
        if not isinstance(current, dict):
            logger.warning("Weather response has no 'current' block")
            return EnvironmentalContext(available=False)

        local_hour = to_user_local(now_utc(), self.user_timezone).hour
        context = context_from_current(current, local_hour)
        if context.available:
            self._cached = context
            self._cached_at = now
        logger.debug(
            f"Weather context: temp={context.temperature}, humidity={context.humidity}, "
            f"precipitation={context.precipitation}, time_of_day={context.time_of_day}"
        )
        return context
