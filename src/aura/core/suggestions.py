"""Contextual suggestions

`generate_suggestions` maps the current environment to candidates; every rule
emits a fixed id so the same condition always produces the same id, which is
what lets `select_next` suppress repeats through the session history.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Sequence

from aura.datamodel import *
from aura.logger import logger

__all__ = [
    "generate_suggestions",
    "select_next",
    "should_proactively_suggest",
    "DEFAULT_COOLDOWN",
    "INDOOR_IDEAS",
]

DEFAULT_COOLDOWN = timedelta(minutes=30)

EXTREME_HEAT_C = 35.0
HOT_C = 30.0
PROACTIVE_HEAT_C = 32.0
HUMID_PERCENT = 70.0
PLEASANT_RANGE_C = (18.0, 28.0)

INDOOR_IDEAS = (
    "Perfect weather for reading or catching up on that series you've been meaning to watch.",
    "Rainy day vibes, maybe a good time for some indoor stretching or meditation?",
    "The rain's keeping things cozy. A good day for focused work or a creative project.",
    "Looks rainy outside. Great excuse to stay in and recharge.",
)


def _as_number(value) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def generate_suggestions(
    context: EnvironmentalContext | None,
    rng: random.Random | None = None,
) -> list[SuggestionCandidate]:
    if context is None or not context.available:
        return []

    rng = rng or random
    temperature = _as_number(context.temperature)
    humidity = _as_number(context.humidity)
    suggestions: list[SuggestionCandidate] = []

    if temperature is not None and temperature > EXTREME_HEAT_C:
        suggestions.append(SuggestionCandidate(
            id="hydration-extreme",
            category=SuggestionCategory.HYDRATION,
            priority=SuggestionPriority.HIGH,
            message=f"It's {round(temperature)}°C outside, really hot. Make sure you're drinking plenty of water today. 💧",
            icon="🥵",
        ))
    elif temperature is not None and temperature > HOT_C:
        suggestions.append(SuggestionCandidate(
            id="hydration-hot",
            category=SuggestionCategory.HYDRATION,
            priority=SuggestionPriority.MEDIUM,
            message=f"Warm day at {round(temperature)}°C. A good time to stay hydrated. 💧",
            icon="☀️",
        ))

    if context.precipitation:
        suggestions.append(SuggestionCandidate(
            id="indoor-rain",
            category=SuggestionCategory.INDOOR,
            priority=SuggestionPriority.LOW,
            message=rng.choice(INDOOR_IDEAS) + " 🌧️",
            icon="🌧️",
        ))

    if context.is_cold:
        chill = f"It's {round(temperature)}°C, quite chilly." if temperature is not None else "It's quite chilly."
        suggestions.append(SuggestionCandidate(
            id="cold-weather",
            category=SuggestionCategory.COMFORT,
            priority=SuggestionPriority.LOW,
            message=f"{chill} Stay warm! ❄️",
            icon="🧊",
        ))

    # stacks with the temperature rules above
    if humidity is not None and humidity > HUMID_PERCENT and context.is_hot:
        suggestions.append(SuggestionCandidate(
            id="humidity-hydration",
            category=SuggestionCategory.HYDRATION,
            priority=SuggestionPriority.MEDIUM,
            message="High humidity today, you might be sweating more than you realize. Extra water would help. 💦",
            icon="💦",
        ))

    low, high = PLEASANT_RANGE_C
    if (
        not context.precipitation
        and not context.is_hot
        and not context.is_cold
        and temperature is not None
        and low <= temperature <= high
        and context.time_of_day in (TimeOfDay.AFTERNOON, TimeOfDay.EVENING)
    ):
        suggestions.append(SuggestionCandidate(
            id="outdoor-nice",
            category=SuggestionCategory.OUTDOOR,
            priority=SuggestionPriority.LOW,
            message=f"Beautiful {round(temperature)}°C outside. Maybe take a short walk if you have time? 🌳",
            icon="🌤️",
        ))

    return suggestions


def select_next(
    state: SuggestionState,
    candidates: Sequence[SuggestionCandidate],
    now: datetime,
    cooldown: timedelta = DEFAULT_COOLDOWN,
) -> SuggestionCandidate | None:
    """Pick the suggestion to surface now, updating `state` when one is picked.

    Returns None while the cooldown since the last surfaced suggestion is
    running. Candidates already in the history are skipped; when that leaves
    nothing although candidates exist, the history is cleared and the first
    candidate is shown again, so a persistent condition is never suppressed
    for good. Otherwise the first high, then first medium, then first
    remaining candidate wins.
    """
    if state.last_fired_at is not None and now - state.last_fired_at < cooldown:
        return None

    fresh = [c for c in candidates if c.id not in state.history]

    if not fresh:
        if not candidates:
            return None
        logger.debug(f"Suggestion history exhausted, rotating: history={state.history}")
        state.reset_history()
        picked = candidates[0]
    else:
        picked = (
            next((c for c in fresh if c.priority == SuggestionPriority.HIGH), None)
            or next((c for c in fresh if c.priority == SuggestionPriority.MEDIUM), None)
            or fresh[0]
        )

    state.record(picked, now)
    return picked


def should_proactively_suggest(context: EnvironmentalContext | None) -> bool:
    if context is None or not context.available:
        return False
    temperature = _as_number(context.temperature)
    if context.is_hot and temperature is not None and temperature > PROACTIVE_HEAT_C:
        return True
    return bool(context.precipitation)
